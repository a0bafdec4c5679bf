"""Authentication dependencies for FastAPI routes."""

from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from meeting_summarizer.core.jwt import JWTVerifier
from meeting_summarizer.schemas.auth import CurrentUser
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def get_jwt_verifier(request: Request) -> JWTVerifier:
    """Return the verifier built at startup."""
    verifier: Optional[JWTVerifier] = getattr(request.app.state, "jwt_verifier", None)
    if verifier is None:
        LOGGER.error("JWT verifier is not initialized")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication service error",
        )
    return verifier


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    verifier: Annotated[JWTVerifier, Depends(get_jwt_verifier)],
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired,
            500 if the key set cannot be fetched
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = await verifier.verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except RuntimeError as e:
        LOGGER.error(f"Authentication service error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication service error",
        ) from e

    user = CurrentUser(
        id=claims.sub,
        email=claims.email,
        role=claims.role or "user",
        user_metadata=claims.user_metadata,
    )
    LOGGER.debug(f"Authenticated user: {user.id}")
    return user
