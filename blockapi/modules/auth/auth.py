"""
Authentication module for blockapi.

Validates and issues HS256 bearer tokens carrying the caller's email. It's
designed as a black box that can be replaced with any auth system without
affecting other modules.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, Optional, Tuple

import jwt

from ...config.provider import AuthConfig

logger = logging.getLogger("blockapi.auth")

BEARER_PREFIX = "Bearer "


class AuthModule:
    """
    Bearer token authentication.

    Tokens are JWTs signed with a shared secret. Without a configured secret
    every token is rejected.
    """

    def __init__(self, config: AuthConfig):
        """
        Initialize auth module.

        Args:
            config: Authentication configuration (secret, algorithm, token TTL)
        """
        self.config = config

    def is_configured(self) -> bool:
        """Check if JWT authentication is configured."""
        return self.config.is_configured

    def validate_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Validate a JWT and return its claims.

        Args:
            token: JWT string (with or without Bearer prefix)

        Returns:
            Claims dictionary if valid, None otherwise
        """
        if not self.is_configured() or not token:
            return None

        if token.startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX):]

        try:
            return jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[self.config.algorithm],
                options={"verify_exp": True},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("JWT token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid JWT token: {e}")
            return None

    async def verify_credentials(
        self, bearer_token: Optional[str] = None
    ) -> Tuple[bool, Optional[str], Optional[Dict[str, Any]]]:
        """
        Verify a bearer token.

        Args:
            bearer_token: Authorization header value

        Returns:
            Tuple of (is_valid, email, claims)
        """
        if not bearer_token:
            return False, None, None

        claims = self.validate_token(bearer_token)
        if claims is None:
            return False, None, None
        return True, claims.get("email"), claims

    def sign_token(self, email: str, expires_in: Optional[int] = None) -> str:
        """
        Issue a token for an email address.

        Args:
            email: Identity stored in the token
            expires_in: Lifetime in seconds (defaults to the configured TTL)

        Returns:
            Encoded JWT

        Raises:
            ValueError: If no secret is configured
        """
        if not self.is_configured():
            raise ValueError("JWT secret not configured")

        now = datetime.now(UTC)
        ttl = expires_in if expires_in is not None else self.config.token_ttl_seconds
        payload = {
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        return jwt.encode(payload, self.config.jwt_secret, algorithm=self.config.algorithm)
