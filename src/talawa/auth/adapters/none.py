"""No-auth adapter for local development without authentication."""

from __future__ import annotations

from uuid import UUID

from ...config import settings
from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)


class NoAuthAdapter:
    """
    No-auth adapter that bypasses authentication for local development.

    Every non-empty token resolves to ``default_user_id``, which must be the id
    of an existing user row for the caller to pass the user lookup.
    WARNING: Only use this in development environments!
    """

    def __init__(self, default_user_id: str):
        if settings.environment.lower() in ("production", "prod"):
            logger.error(
                "NoAuthAdapter detected in production environment! "
                "This is a security risk and should never be used in production.",
                environment=settings.environment,
            )
            raise RuntimeError(
                "NoAuthAdapter cannot be used in production environments. "
                "Please configure a proper authentication provider."
            )

        self.default_user_id = default_user_id

        logger.warning(
            "NoAuthAdapter is active - ALL requests will be treated as authenticated!",
            user_id=default_user_id,
            environment=settings.environment,
        )

    async def verify_token(self, token: str) -> Principal:
        """
        Always returns the default principal - no actual verification.

        Any non-empty token will be accepted. The token content doesn't matter.
        """
        if not token:
            raise AuthenticationError("Token required (even in no-auth mode)")

        return Principal(
            provider="none",
            subject=self.default_user_id,
            claims={"mode": "development"},
        )

    async def issue_token(self, user_id: UUID | None = None, claims: dict | None = None) -> str:
        """Issue a fake development token."""
        token_parts = ["dev-token", str(user_id) if user_id else self.default_user_id]

        if claims:
            token_parts.extend(f"{k}={v}" for k, v in claims.items())

        return "|".join(token_parts)
