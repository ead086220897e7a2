from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class UsageResponse(BaseModel):
    can_generate: bool
    current_usage: int
    daily_limit: int
    remaining: int
    subscribed: bool


class GenerateRequest(BaseModel):
    resume_id: Optional[str] = None  # Uploaded resume (requires auth)
    resume_text: Optional[str] = None  # Manually entered resume content
    job_description: str = Field(min_length=1)


class PersonalInfo(BaseModel):
    name: str
    email: str
    phone: str
    location: str


class ExperienceEntry(BaseModel):
    title: str
    company: str
    duration: str
    description: str


class EducationEntry(BaseModel):
    degree: str
    institution: str
    year: str


class GeneratedResume(BaseModel):
    personal_info: PersonalInfo
    summary: str
    experience: List[ExperienceEntry]
    education: List[EducationEntry]
    skills: List[str]


class GenerateResponse(BaseModel):
    resume: GeneratedResume
    usage: UsageResponse


class ResumeSummary(BaseModel):
    id: str
    title: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UploadResponse(BaseModel):
    message: str
    resume_id: str
    filename: str
