"""Response envelope shared by every endpoint."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ResponseMeta(BaseModel):
    timestamp: datetime = Field(..., description="Time the response was produced")
    request_id: str = Field(..., description="Request correlation id")
    api_version: str = Field(default="v1", description="API version")


class ErrorDetail(BaseModel):
    """Problem details for a failed request."""

    title: str = Field(..., description="Short error summary")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Human readable explanation")
    instance: Optional[str] = Field(None, description="Request path")
    request_id: Optional[str] = Field(None, description="Request correlation id")
    timestamp: Optional[datetime] = Field(None, description="Time of the error")


class ApiResponse(BaseModel):
    success: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Human readable outcome")
    data: Optional[Dict[str, Any]] = Field(None, description="Operation payload")
    error: Optional[ErrorDetail] = Field(None, description="Error details when success is false")
    meta: ResponseMeta
