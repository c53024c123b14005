"""Response envelopes shared by every endpoint."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class SuccessResponse(BaseModel, Generic[DataT]):
    """Successful response wrapping its payload in ``data``."""

    status: Literal["success"] = "success"
    data: DataT


class ErrorResponse(BaseModel):
    """Error response with a human readable message."""

    status: Literal["error"] = "error"
    message: str = Field(description="What went wrong")


class ValidationErrorResponse(BaseModel):
    """Error response listing every failed field check."""

    status: Literal["error"] = "error"
    errors: list[dict[str, Any]] = Field(description="Failed checks, one per field problem")
