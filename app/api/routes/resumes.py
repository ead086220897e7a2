import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.dependencies.auth import get_current_user_id, get_optional_identity
from app.models.resume import Resume
from app.schemas.resume import UsageResponse, GenerateRequest, GenerateResponse, ResumeSummary
from app.services import usage_gate
from app.services.identity import Identity
from app.services.resume_generator import GenerationError, generate_resume
from app.services.usage_ledger import today_utc

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/usage", response_model=UsageResponse)
def get_usage(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_optional_identity),
):
    """Today's generation usage for the caller (account or anonymous). Read-only."""
    return usage_gate.check_usage(db, identity).as_dict()


def _resolve_resume_text(request: GenerateRequest, identity: Identity, db: Session) -> str:
    if request.resume_id:
        if identity.is_anonymous:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Access token required to use an uploaded resume"
            )
        resume = db.query(Resume).filter(
            Resume.id == request.resume_id,
            Resume.user_id == identity.account_id
        ).first()
        if not resume:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Resume not found"
            )
        return resume.content

    if request.resume_text and request.resume_text.strip():
        return request.resume_text

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Resume ID or resume text is required"
    )


@router.post("/generate-with-job", response_model=GenerateResponse)
def generate_with_job(
    request: GenerateRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_optional_identity),
):
    """
    Tailor a resume to a job description.
    Order is check -> generate -> record: a failed generation does not use up quota.
    """
    resume_text = _resolve_resume_text(request, identity, db)

    # Fix the day once so check and record hit the same ledger row across midnight
    day = today_utc()

    usage = usage_gate.check_usage(db, identity, day)
    if not usage.can_generate:
        logger.info("Daily limit reached (%s/%s); refusing generation", usage.current_usage, usage.daily_limit)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"message": "Daily generation limit reached", **usage.as_dict()}
        )

    try:
        generated = generate_resume(resume_text, request.job_description)
    except GenerationError as e:
        logger.exception("Resume generation failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Resume generation failed: {str(e)}"
        )

    record = usage_gate.record_generation(db, identity, day)
    if not record.accepted:
        # Hard cap: a concurrent request took the last unit after our check
        usage = usage_gate.check_usage(db, identity, day)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"message": "Daily generation limit reached", **usage.as_dict()}
        )

    return {
        "resume": generated,
        "usage": usage_gate.check_usage(db, identity, day).as_dict(),
    }


@router.get("", response_model=list[ResumeSummary])
def list_resumes(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return db.query(Resume).filter(
        Resume.user_id == user_id
    ).order_by(Resume.created_at.desc()).all()


@router.delete("/{resume_id}")
def delete_resume(
    resume_id: str,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    deleted = db.query(Resume).filter(
        Resume.id == resume_id,
        Resume.user_id == user_id
    ).delete()
    db.commit()

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resume not found"
        )

    return {"message": "Resume deleted successfully"}
