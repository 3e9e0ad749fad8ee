from fastapi import APIRouter, Depends, HTTPException, status
from app.core.config import settings
from app.db.core import get_session
from sqlmodel import Session, text
from loguru import logger

router = APIRouter()


@router.get("/", status_code=status.HTTP_200_OK)
def index():
    return {"status": "API is running", "app": settings.app_name}


@router.get("/readiness", status_code=status.HTTP_200_OK)
def readiness_check(session: Session = Depends(get_session)):
    """Answers 503 while the database cannot be reached."""
    try:
        session.exec(text("SELECT 1"))
    except Exception:
        logger.exception("Database readiness check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not ready"
        )

    return {"status": "ready", "database": "online"}
