"""Health check endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user_data import UserData

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/db")
def db_health_check(db: Session = Depends(get_db)) -> dict[str, str | int]:
    """Check the store table is reachable and report how many values it holds."""
    try:
        stored = db.execute(select(func.count()).select_from(UserData)).scalar_one()
        return {"status": "healthy", "database": "connected", "stored_values": stored}
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "database": str(e)}
