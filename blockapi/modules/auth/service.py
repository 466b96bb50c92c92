"""
Authentication Service Facade following Black Box Design principles.

This module provides:
- A clean interface for authentication that hides implementation details
- Standardized authentication results
- Protocol definitions for swappable implementations
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol

from .auth import BEARER_PREFIX


@dataclass
class AuthResult:
    """Standardized authentication result."""
    ok: bool
    identity: Optional[str]
    method: Optional[Literal["jwt"]]
    error: Optional[str] = None
    claims: Optional[dict] = None


class AuthenticationService(Protocol):
    """Protocol for authentication services."""

    def is_configured(self) -> bool:
        ...

    async def authenticate(self, authorization: Optional[str]) -> AuthResult:
        """
        Authenticate a request.

        Args:
            authorization: Authorization header value

        Returns:
            AuthResult with authentication status and details
        """
        ...


class DefaultAuthenticationService:
    """
    Default implementation of AuthenticationService.

    This facade hides the complexity of the underlying auth module
    and provides a clean, stable interface for the request pipeline.
    """

    def __init__(self, auth_module: Any):
        """
        Initialize with any auth module that has verify_credentials.

        Args:
            auth_module: Module with verify_credentials and is_configured methods
        """
        self._auth = auth_module

    def is_configured(self) -> bool:
        return self._auth.is_configured()

    async def authenticate(self, authorization: Optional[str]) -> AuthResult:
        """
        Authenticate a request using the underlying auth module.

        Args:
            authorization: Authorization header value

        Returns:
            AuthResult with authentication status and details
        """
        if not self._auth.is_configured():
            return AuthResult(
                ok=False, identity=None, method=None,
                error="JWT authentication not configured",
            )

        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return AuthResult(
                ok=False, identity=None, method=None,
                error="Missing or invalid authorization header",
            )

        ok, identity, claims = await self._auth.verify_credentials(bearer_token=authorization)

        if ok:
            return AuthResult(ok=True, identity=identity, method="jwt", claims=claims)
        return AuthResult(
            ok=False, identity=None, method=None,
            error="Invalid or expired token",
        )
