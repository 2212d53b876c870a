"""Shared API dependencies."""

from collections.abc import Generator

import pytz
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User as UserModel
from src.services.controller import InsightController
from src.services.store import SqlKeyValueStore


def get_user(user_id: int, db: Session = Depends(get_db)) -> UserModel:
    """Resolve the user from the path or fail with 404."""
    user = db.query(UserModel).filter(UserModel.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_controller(
    user: UserModel = Depends(get_user), db: Session = Depends(get_db)
) -> Generator[InsightController, None, None]:
    """Build the user's controller for the duration of one request."""
    controller = InsightController(
        SqlKeyValueStore(db), user.scope, tz=pytz.timezone(user.timezone or "UTC")
    )
    try:
        yield controller
    finally:
        controller.close()
