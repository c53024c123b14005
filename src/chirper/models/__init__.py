"""SQLAlchemy ORM models."""

from chirper.models.tweet import Tweet
from chirper.models.user import User

__all__ = [
    "Tweet",
    "User",
]
