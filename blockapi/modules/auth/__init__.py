"""
Authentication Module - Black Box Interface

Purpose: Validate and issue bearer tokens
Interface: AuthFactory.build(), AuthenticationService.authenticate(), AuthModule.sign_token()
Hidden: Token format, signing algorithm, claim handling

This module can be completely replaced with any other auth implementation
(OAuth, OIDC, external service) without affecting other modules.
"""

from .auth import AuthModule
from .factory import AuthFactory
from .service import AuthenticationService, AuthResult, DefaultAuthenticationService

__all__ = [
    "AuthModule",
    "AuthFactory",
    "AuthenticationService",
    "AuthResult",
    "DefaultAuthenticationService",
]
