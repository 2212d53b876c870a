"""SQLAlchemy ORM models."""

from src.models.user import User
from src.models.user_data import UserData

__all__ = [
    "User",
    "UserData",
]
