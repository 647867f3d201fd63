from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from friendhub.core.config import settings
from friendhub.database.database import get_db

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("")
async def health(db: Session = Depends(get_db)):
    """Проверка работоспособности"""
    try:
        db.connection()
        return {"status": "healthy", "database": "connected", "version": settings.APP_VERSION}
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e)
        }
