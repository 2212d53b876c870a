"""Key-value rows backing the persistence adapter."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class UserData(Base, TimestampMixin):
    """One JSON value stored under a (scope, key) pair.

    The scope is the owning user's id rendered as a string. Writes replace
    the whole value; there is no merging between concurrent writers.
    """

    __tablename__ = "user_data"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="data")  # noqa: F821

    __table_args__ = (
        UniqueConstraint("user_id", "key", name="uq_user_data_user_id_key"),
        Index("idx_user_data_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<UserData(user_id={self.user_id}, key='{self.key}')>"
