"""
Resume Generator Backend API
Daily usage metering per identity against subscription tiers.
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True  # Override any existing configuration
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
ALEMBIC_INI = PROJECT_ROOT / "alembic.ini"


def run_migrations() -> None:
    """Run Alembic migrations on startup. Uses alembic.ini and DATABASE_URL.
    Fails startup if migrations fail, so the DB is never left out of sync."""
    from app.db.session import get_database_url

    try:
        alembic_cfg = Config(str(ALEMBIC_INI))
        alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
        alembic_cfg.set_main_option("sqlalchemy.url", get_database_url())
        command.upgrade(alembic_cfg, "head")
        logger.info("Alembic migrations completed successfully")
    except Exception as e:
        logger.exception("Alembic migration failed: %s", e)
        raise  # Fail startup so DB is not left out of sync


from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api.routes import auth, users, resumes, upload as upload_router, subscription
from app.core.errors import LedgerUnavailable, ValidationError
from app.db.session import engine
from app.db.base import Base
# Import all models to ensure they're registered with Base
from app.models import User, Subscription, Resume, ResumeUsage  # noqa: F401

app = FastAPI(title="Resume Generator")


@app.on_event("startup")
def startup_event():
    """Bring the schema up to date.
    With DATABASE_URL set the schema is owned by Alembic; otherwise (local SQLite) tables are created directly."""
    if os.getenv("DATABASE_URL") and ALEMBIC_INI.exists():
        run_migrations()
        return

    logger.info("DATABASE_URL not set; creating tables on the local database")
    Base.metadata.create_all(bind=engine)


@app.exception_handler(ValidationError)
async def usage_validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(LedgerUnavailable)
async def ledger_unavailable_handler(request: Request, exc: LedgerUnavailable):
    # Ledger outage, never reported as the 429 "limit reached" answer
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173,http://localhost:8080"
        ).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health():
    return {"status": "OK", "message": "Server is running"}


# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/profile", tags=["Profile"])
app.include_router(resumes.router, prefix="/api/resumes", tags=["Resumes"])
app.include_router(upload_router.router, prefix="/api", tags=["Upload"])
app.include_router(subscription.router, prefix="/api/subscription", tags=["Subscription"])
