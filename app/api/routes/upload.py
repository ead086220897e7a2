"""
Upload route for resume documents.
The file is saved under UPLOADS_DIR, its text extracted, and a Resume row stored
so the resume can later be tailored with POST /api/resumes/generate-with-job.
"""
import logging
import os
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.dependencies.auth import get_current_user_id
from app.models.resume import Resume
from app.schemas.resume import UploadResponse
from app.services.text_extraction import extract_text

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf", ".doc", ".docx"}
ALLOWED_CONTENT_TYPES = {
    "image/jpeg",
    "image/png",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def get_uploads_dir() -> Path:
    """Return the uploads directory, creating it if needed."""
    # Prefer env so deployment can set a persistent volume path
    base = os.getenv("UPLOADS_DIR")
    if base:
        d = Path(base)
    else:
        d = Path(__file__).resolve().parent.parent.parent.parent / "uploads"
    d.mkdir(parents=True, exist_ok=True)
    return d


@router.post("/upload", response_model=UploadResponse)
async def upload_resume(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    content_type = (file.content_type or "").strip().lower()
    ext = Path(file.filename or "").suffix.lower()
    if ext not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Allowed: jpeg, jpg, png, pdf, doc, docx",
        )

    content = await file.read()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File exceeds maximum size of 10MB",
        )

    resume_id = str(uuid.uuid4())
    target_path = get_uploads_dir() / f"{resume_id}{ext}"
    try:
        target_path.write_bytes(content)
    except OSError as e:
        logger.exception("Failed to save upload for user %s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save file: {str(e)}",
        )

    extracted_text = extract_text(content, content_type)

    resume = Resume(
        id=resume_id,
        user_id=user_id,
        title=file.filename,
        content=extracted_text,
        file_path=str(target_path),
    )
    db.add(resume)
    db.commit()

    return {
        "message": "Resume uploaded successfully",
        "resume_id": resume_id,
        "filename": file.filename,
    }
