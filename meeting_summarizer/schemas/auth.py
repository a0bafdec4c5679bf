"""Authentication schemas for bearer JWT tokens."""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class JWTClaims(BaseModel):
    """Claims extracted from a verified access token."""

    sub: str = Field(..., description="Subject (user ID)")
    exp: int = Field(..., description="Expiration timestamp")
    iss: Optional[str] = Field(None, description="Token issuer")
    iat: Optional[int] = Field(None, description="Issued at timestamp")
    email: Optional[str] = Field(None, description="User email")
    role: Optional[str] = Field(None, description="User role")
    aud: Optional[Union[str, list[str]]] = Field(None, description="Audience")
    user_metadata: Optional[Dict[str, Any]] = Field(None, description="User metadata")


class CurrentUser(BaseModel):
    """Current authenticated user information."""

    id: str = Field(..., description="Subject id, also the document owner id")
    email: Optional[str] = Field(None, description="User email")
    role: str = Field(default="user", description="User role")
    user_metadata: Optional[Dict[str, Any]] = Field(None, description="User metadata")


__all__ = ["JWTClaims", "CurrentUser"]
