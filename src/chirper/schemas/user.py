"""Pydantic schemas for user and authentication API endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


class UserCreate(BaseModel):
    """Schema for user registration."""

    email: EmailStr = Field(description="Valid email address (10-40 characters)")
    username: str = Field(
        min_length=2,
        max_length=40,
        description="Unique username (2-40 characters)",
    )
    fullname: str = Field(
        min_length=2,
        max_length=40,
        description="Display name (2-40 characters)",
    )
    password: str = Field(
        min_length=6,
        max_length=100,
        description="Password (6-100 characters)",
    )
    password2: str | None = Field(default=None, description="Password confirmation")

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        if not 10 <= len(v) <= 40:
            raise ValueError("Email must be between 10 and 40 characters")
        # Stored lowercase so login and duplicate checks ignore case
        return v.lower()

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username contains only allowed characters."""
        if not v.replace("_", "").replace("-", "").isalnum():
            msg = "Username can only contain letters, numbers, underscores, and hyphens"
            raise ValueError(msg)
        return v.lower()

    @field_validator("fullname")
    @classmethod
    def validate_fullname(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Full name must be at least 2 characters")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v

    @model_validator(mode="after")
    def check_passwords_match(self) -> "UserCreate":
        if self.password2 is not None and self.password2 != self.password:
            raise ValueError("Passwords do not match")
        return self


class TweetSummary(BaseModel):
    """A post as embedded in its author's profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Tweet ID")
    text: str = Field(description="Tweet body")
    created_at: datetime = Field(description="When the tweet was posted")


class UserResponse(BaseModel):
    """Response schema for user data (excludes password and confirmation hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="User ID")
    email: str = Field(description="Email address")
    username: str = Field(description="Username")
    fullname: str = Field(description="Full name")
    confirmed: bool = Field(description="Whether the email address has been confirmed")
    created_at: datetime = Field(description="When the user was created")


class UserWithTweets(UserResponse):
    """User profile with authored tweets, newest first."""

    tweets: list[TweetSummary] = Field(default_factory=list, description="Authored tweets")


class UserWithToken(UserResponse):
    """User data plus a freshly issued session token."""

    token: str = Field(description="JWT session token")


class UserLogin(BaseModel):
    """Schema for user login request."""

    username: str = Field(description="Username or email")
    password: str = Field(description="Password")
