"""
Resume generation. This is a deterministic stand-in for an AI model:
it returns a structured resume shaped around the job description.
"""
from typing import Any, Dict, List

SUMMARY_PREVIEW_CHARS = 100

DEFAULT_SKILLS = ["JavaScript", "React", "Node.js", "Python", "SQL"]


class GenerationError(Exception):
    """Generation did not produce a resume. No usage must be recorded."""


def _pick_skills(resume_text: str, job_description: str) -> List[str]:
    text = f"{resume_text}\n{job_description}".lower()
    matched = [skill for skill in DEFAULT_SKILLS if skill.lower() in text]
    return matched or list(DEFAULT_SKILLS)


def generate_resume(resume_text: str, job_description: str) -> Dict[str, Any]:
    job_description = (job_description or "").strip()
    if not job_description:
        raise GenerationError("Job description is empty")

    return {
        "personal_info": {
            "name": "John Doe",
            "email": "john.doe@email.com",
            "phone": "(555) 123-4567",
            "location": "New York, NY",
        },
        "summary": f"Professional with experience tailored for: {job_description[:SUMMARY_PREVIEW_CHARS]}...",
        "experience": [
            {
                "title": "Senior Developer",
                "company": "Tech Company",
                "duration": "2020-2024",
                "description": "Led development projects with focus on technologies mentioned in job description.",
            }
        ],
        "education": [
            {
                "degree": "Bachelor of Computer Science",
                "institution": "University",
                "year": "2020",
            }
        ],
        "skills": _pick_skills(resume_text or "", job_description),
    }
