"""Password hashing, confirmation hashes, JWT handling and principals."""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Annotated

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from chirper.config import get_settings
from chirper.database import get_db
from chirper.schemas.user import UserLogin, UserResponse

if TYPE_CHECKING:
    from chirper.models.user import User

# Bearer token is optional here; require_user decides whether it is mandatory
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


@dataclass(frozen=True)
class Anonymous:
    """No valid credential was presented."""


@dataclass(frozen=True)
class Authenticated:
    """A credential was verified and resolved to a stored user."""

    user: "User"


Principal = Anonymous | Authenticated

# Largest value an INTEGER primary key can hold
MAX_ID = 2**63 - 1

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a plain text password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a hashed password."""
    password_bytes = plain_password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        return False
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def generate_confirm_hash(secret_key: str | None = None) -> str:
    """Create an unguessable email confirmation hash.

    The value is an HMAC of fresh random bytes keyed by the server secret,
    so it reveals nothing about the user's password.
    """
    key = (secret_key or get_settings().secret_key).encode("utf-8")
    return hmac.new(key, secrets.token_bytes(32), hashlib.sha256).hexdigest()


def is_valid_id(value: str) -> bool:
    """Return True if a path parameter looks like a user primary key."""
    return value.isascii() and value.isdigit() and int(value) > 0


def is_storable_id(value: str) -> bool:
    """Return True if a well-formed id also fits the primary key column."""
    return is_valid_id(value) and int(value) <= MAX_ID


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data to encode in the token. The "sub" (subject) claim
              must be a string (e.g., {"sub": str(user_id)}).
        expires_delta: Optional custom expiration time. Defaults to settings value.

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(days=settings.jwt_access_token_expire_days)

    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def create_user_token(user: "User") -> str:
    """Issue a session token embedding a public snapshot of the user."""
    snapshot = UserResponse.model_validate(user).model_dump(mode="json")
    return create_access_token(data={"sub": str(user.id), "data": snapshot})


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT access token.

    Returns:
        Decoded token payload if valid, None if invalid or expired
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None


async def get_bearer_principal(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve the Authorization header into a principal.

    Missing, invalid or expired tokens, and tokens whose user no longer
    exists, all resolve to Anonymous.
    """
    # Import here to avoid circular import
    from chirper.models.user import User

    if not token:
        return Anonymous()

    payload = decode_access_token(token)
    if payload is None:
        return Anonymous()

    user_id_str = payload.get("sub")
    if not isinstance(user_id_str, str) or not is_storable_id(user_id_str):
        return Anonymous()

    result = await db.execute(select(User).where(User.id == int(user_id_str)))
    user = result.scalar_one_or_none()

    if user is None:
        return Anonymous()
    return Authenticated(user=user)


async def get_credentials_principal(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve a username-or-email and password pair into a principal."""
    from chirper.models.user import User

    login = credentials.username.lower()
    query = select(User).where(or_(User.username == login, User.email == login))
    result = await db.execute(query)
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        return Anonymous()
    return Authenticated(user=user)


async def require_user(
    principal: Annotated[Principal, Depends(get_bearer_principal)],
) -> "User":
    """Return the bearer token's user or fail with 401."""
    if not isinstance(principal, Authenticated):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal.user


async def require_login(
    principal: Annotated[Principal, Depends(get_credentials_principal)],
) -> "User":
    """Return the logged-in user or fail with 401 / 403.

    Raises:
        HTTPException 401: If the credentials do not match a user
        HTTPException 403: If the user has not confirmed their email
    """
    if not isinstance(principal, Authenticated):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    if not principal.user.confirmed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email address is not confirmed",
        )
    return principal.user


# Type aliases for use in route dependencies
CurrentUser = Annotated["User", Depends(require_user)]
LoggedInUser = Annotated["User", Depends(require_login)]
