"""User ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chirper.database import Base

if TYPE_CHECKING:
    from chirper.models.tweet import Tweet


class User(Base):
    """Registered account; unconfirmed until the emailed hash comes back."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    fullname: Mapped[str] = mapped_column(String(100))
    password_hash: Mapped[str] = mapped_column(String(255))
    confirm_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    confirmed: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    # Relationships
    tweets: Mapped[list[Tweet]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Tweet.created_at.desc()",
    )
