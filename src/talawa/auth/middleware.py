"""Authentication middleware for FastAPI."""

from __future__ import annotations

from uuid import UUID

from fastapi import Header, HTTPException

from ..logging import bind_user_id, get_logger
from .adapters.base import AuthenticationError
from .context import AuthContext
from .factory import get_auth_adapter

logger = get_logger(__name__)


async def get_auth_context(authorization: str | None = Header(None)) -> AuthContext:
    """
    Extract authentication context from request headers.

    This function:
    1. Extracts Bearer token from Authorization header
    2. Verifies token using the configured auth adapter
    3. Maps the token subject onto a user id
    4. Returns AuthContext for the request

    Whether the user id still resolves to a user row is left to the resolvers.

    Args:
        authorization: Authorization header (Bearer token)

    Returns:
        AuthContext with user and token info
    """
    if not authorization:
        return AuthContext.anonymous()

    if not authorization.startswith("Bearer "):
        logger.warning("Invalid authorization format received")
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]

    if not token:
        logger.warning("Empty token provided")
        raise HTTPException(
            status_code=401,
            detail="Empty token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    adapter = get_auth_adapter()

    try:
        principal = await adapter.verify_token(token)
        try:
            user_id = UUID(principal["subject"])
        except ValueError as e:
            raise AuthenticationError("Token subject is not a user id") from e
    except AuthenticationError as e:
        logger.warning("Authentication failed", error=str(e))
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    bind_user_id(str(user_id))
    logger.debug("Request authenticated", provider=principal["provider"])

    return AuthContext(user_id=user_id, principal=principal, token=token)


async def get_auth_context_optional(authorization: str | None = Header(None)) -> AuthContext:
    """
    Optional authentication - returns unauthenticated context if no valid token.

    Use this where the caller decides how to report missing authentication.
    """
    try:
        return await get_auth_context(authorization)
    except HTTPException:
        return AuthContext.anonymous()
