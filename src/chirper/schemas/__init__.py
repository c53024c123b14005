"""Pydantic schemas for request/response validation."""

from chirper.schemas.common import ErrorResponse, SuccessResponse, ValidationErrorResponse
from chirper.schemas.user import (
    TweetSummary,
    UserCreate,
    UserLogin,
    UserResponse,
    UserWithToken,
    UserWithTweets,
)

__all__ = [
    # Envelopes
    "SuccessResponse",
    "ErrorResponse",
    "ValidationErrorResponse",
    # User schemas
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserWithToken",
    "UserWithTweets",
    "TweetSummary",
]
