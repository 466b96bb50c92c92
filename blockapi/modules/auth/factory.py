"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires dependencies together
- Returns only the service facade (hiding implementation)
"""

import logging
from typing import Any, Optional

from .auth import AuthModule
from .service import AuthenticationService, DefaultAuthenticationService
from ...config.provider import AuthConfig, ConfigProvider

logger = logging.getLogger("blockapi.auth.factory")


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Creates all auth components
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(config_provider: ConfigProvider) -> AuthenticationService:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider

        Returns:
            AuthenticationService facade (hides all implementation details)
        """
        auth_config = config_provider.get_auth_config()

        if auth_config.is_configured:
            logger.info(f"Building authentication stack with {auth_config.algorithm} bearer tokens")
        else:
            logger.warning("JWT_SECRET not set - endpoints requiring auth will reject all requests")

        return DefaultAuthenticationService(AuthModule(auth_config))

    @staticmethod
    def build_for_testing(
        secret: Optional[str] = "test-secret",
        mock_auth_module: Optional[Any] = None,
    ) -> AuthenticationService:
        """
        Build auth stack for testing.

        Args:
            secret: Shared secret for the token module
            mock_auth_module: Replaces the token module entirely

        Returns:
            AuthenticationService for testing
        """
        if mock_auth_module:
            return DefaultAuthenticationService(mock_auth_module)
        return DefaultAuthenticationService(AuthModule(AuthConfig(jwt_secret=secret)))
