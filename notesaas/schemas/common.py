"""
Schemas shared by every feature: the ORM-friendly base, the success and
error envelopes, and pagination parameters.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,  # Build from SQLAlchemy objects
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class PaginationParams(BaseModel):
    """``?skip=&limit=`` on list endpoints."""

    skip: int = Field(0, ge=0, description="Number of records to skip")
    limit: int = Field(50, ge=1, le=100, description="Maximum records to return")


class SuccessResponse(BaseSchema):
    """Payload fields are added by subclasses."""

    success: bool = True


class MessageResponse(SuccessResponse):
    message: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    success: bool = False
    error: str
    code: str
    details: Any | None = None


# OpenAPI documentation for the errors any authenticated route can return
COMMON_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Role, tenant or quota violation"},
    404: {"model": ErrorResponse, "description": "Not found in the caller's tenant"},
}
