"""User API endpoints."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Response
from fastapi.exceptions import RequestValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from chirper.config import Settings, get_settings
from chirper.database import get_db
from chirper.models.user import User
from chirper.schemas.common import SuccessResponse
from chirper.schemas.user import TweetSummary, UserCreate, UserResponse, UserWithTweets
from chirper.services.mailer import Mailer, get_mailer
from chirper.utils.security import (
    CurrentUser,
    generate_confirm_hash,
    hash_password,
    is_storable_id,
    is_valid_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def user_to_response(user: User) -> UserResponse:
    """Convert a User model to its public schema."""
    return UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        fullname=user.fullname,
        confirmed=user.confirmed,
        created_at=user.created_at,
    )


def user_to_response_with_tweets(user: User) -> UserWithTweets:
    """Convert a User model to UserWithTweets.

    Requires user.tweets to be loaded.
    """
    tweets = [
        TweetSummary(id=tweet.id, text=tweet.text, created_at=tweet.created_at)
        for tweet in user.tweets
    ]
    return UserWithTweets(**user_to_response(user).model_dump(), tweets=tweets)


def already_registered(field: str, value: str) -> dict:
    """Build a validation error entry for a taken username or email."""
    return {
        "type": "value_error",
        "loc": ("body", field),
        "msg": f"{field.capitalize()} already registered",
        "input": value,
    }


@router.get("", response_model=SuccessResponse[list[UserResponse]])
async def list_users(db: AsyncSession = Depends(get_db)) -> SuccessResponse[list[UserResponse]]:
    """List every registered user."""
    result = await db.execute(select(User).order_by(User.id))
    users = result.scalars().all()

    return SuccessResponse(data=[user_to_response(user) for user in users])


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def get_current_user_info(current_user: CurrentUser) -> SuccessResponse[UserResponse]:
    """Get the current authenticated user's information.

    Requires a valid JWT token in the Authorization header.
    """
    return SuccessResponse(data=user_to_response(current_user))


@router.get(
    "/{user_id}",
    response_model=SuccessResponse[UserWithTweets],
    responses={400: {"description": "Malformed user id"}, 404: {"description": "User not found"}},
)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse[UserWithTweets] | Response:
    """Get a user by id with their tweets."""
    if not is_valid_id(user_id):
        return Response(status_code=400)

    # Too large for the primary key column, so no such user can exist
    if not is_storable_id(user_id):
        return Response(status_code=404)

    query = select(User).where(User.id == int(user_id)).options(selectinload(User.tweets))
    result = await db.execute(query)
    user = result.scalar_one_or_none()

    if user is None:
        return Response(status_code=404)

    return SuccessResponse(data=user_to_response_with_tweets(user))


@router.post("", response_model=SuccessResponse[UserResponse], status_code=201)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> SuccessResponse[UserResponse]:
    """Register a new user and email them a confirmation link.

    The account starts unconfirmed. If the confirmation email cannot be
    sent the request fails and the insert is rolled back.

    Raises:
        RequestValidationError: If username or email already exists
    """
    # Check if username already exists
    username_query = select(User).where(User.username == user_data.username)
    username_result = await db.execute(username_query)
    if username_result.scalar_one_or_none():
        raise RequestValidationError([already_registered("username", user_data.username)])

    # Check if email already exists
    email_query = select(User).where(User.email == user_data.email)
    email_result = await db.execute(email_query)
    if email_result.scalar_one_or_none():
        raise RequestValidationError([already_registered("email", user_data.email)])

    new_user = User(
        email=user_data.email,
        username=user_data.username,
        fullname=user_data.fullname,
        password_hash=hash_password(user_data.password),
        confirm_hash=generate_confirm_hash(settings.secret_key),
        confirmed=False,
        created_at=datetime.now(UTC).replace(tzinfo=None),
    )
    db.add(new_user)
    await db.flush()
    await db.refresh(new_user)

    await mailer.send_verification(new_user.email, new_user.confirm_hash)
    logger.info("Registered user %s (id=%s)", new_user.username, new_user.id)

    return SuccessResponse(data=user_to_response(new_user))
