from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request
from pydantic import BaseModel

from meeting_summarizer.schemas.responses import ApiResponse, ErrorDetail, ResponseMeta


def _request_id(request: Optional[Request]) -> str:
    if request is not None and hasattr(request.state, "correlation_id"):
        return request.state.correlation_id
    return str(uuid4())


def _build_meta(request: Optional[Request], api_version: str) -> ResponseMeta:
    return ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version,
    )


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    success: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1",
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Pydantic payloads are dumped by alias, so ``data`` carries camelCase keys.
    """
    data_dict: Dict[str, Any] = {}
    if isinstance(data, BaseModel):
        data_dict = data.model_dump(mode="json", by_alias=True)
    elif isinstance(data, dict):
        data_dict = {
            key: value.model_dump(mode="json", by_alias=True) if isinstance(value, BaseModel) else value
            for key, value in data.items()
        }
    elif data is not None:
        data_dict = {"value": data}

    response = ApiResponse(
        success=success,
        message=message,
        data=data_dict,
        meta=_build_meta(request, api_version),
    )
    return response.model_dump(mode="json", exclude={"error"})


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None,
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=_request_id(request),
        timestamp=datetime.now(timezone.utc),
    )


def create_error_response(
    error: ErrorDetail,
    request: Optional[Request] = None,
    api_version: str = "v1",
) -> Dict[str, Any]:
    """Wrap an error detail in the envelope with ``success`` false and no data."""
    response = ApiResponse(
        success=False,
        message=error.detail,
        error=error,
        meta=_build_meta(request, api_version),
    )
    return response.model_dump(mode="json", exclude={"data"})
