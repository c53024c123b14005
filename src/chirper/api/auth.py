"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chirper.api.users import user_to_response
from chirper.database import get_db
from chirper.models.user import User
from chirper.schemas.common import SuccessResponse
from chirper.schemas.user import UserWithToken
from chirper.utils.security import LoggedInUser, create_user_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def user_with_token(user: User) -> UserWithToken:
    """Attach a freshly issued session token to the user's public data."""
    return UserWithToken(**user_to_response(user).model_dump(), token=create_user_token(user))


@router.get(
    "/verify",
    response_model=SuccessResponse[UserWithToken],
    responses={400: {"description": "Missing hash"}},
)
async def verify_email(
    confirm_hash: str | None = Query(
        None, alias="hash", description="Confirmation hash from the registration email"
    ),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse[UserWithToken] | Response:
    """Confirm a user's email address and log them in.

    Verifying an already confirmed account succeeds again and issues a new
    token; confirmation hashes do not expire.

    Raises:
        HTTPException 404: If no user has this confirmation hash
    """
    if not confirm_hash:
        return Response(status_code=400)

    result = await db.execute(select(User).where(User.confirm_hash == confirm_hash))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    user.confirmed = True
    await db.flush()
    logger.info("Confirmed email for user %s (id=%s)", user.username, user.id)

    return SuccessResponse(data=user_with_token(user))


@router.post("/login", response_model=SuccessResponse[UserWithToken])
async def login(current_user: LoggedInUser) -> SuccessResponse[UserWithToken]:
    """Return the logged-in user with a session token.

    Accepts either username or email in the username field. Credentials
    are checked by the LoggedInUser dependency before this runs.
    """
    logger.info("User %s logged in", current_user.username)
    return SuccessResponse(data=user_with_token(current_user))
