"""
Shared pytest fixtures for blockapi tests.

This module provides common fixtures including:
- Redis mocks for the audit trail
- Static configuration and token helpers
- Registry / loader instances and a definition factory
- FastAPI test clients built with create_app()
"""

import os
import sys
from typing import Any, Callable, Dict, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from blockapi.config.provider import (
    DEFAULT_ENDPOINTS_DIR,
    APIConfig,
    AuditConfig,
    AuthConfig,
    RegistryConfig,
    StaticConfigProvider,
)
from blockapi.modules.auth import AuthModule
from blockapi.modules.capability import BlockKind, CapabilityDefinition, normalize_schema
from blockapi.modules.loader import DynamicLoader
from blockapi.modules.registry import Registry

TEST_SECRET = "test-secret-for-blockapi-0123456789abcdef"
ADMIN_EMAIL = "admin@example.com"


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Mock async Redis client covering the list operations the audit trail uses."""
    redis = AsyncMock()
    redis.lpush = AsyncMock(return_value=1)
    redis.ltrim = AsyncMock(return_value=True)
    redis.lrange = AsyncMock(return_value=[])
    redis.aclose = AsyncMock()
    return redis


# =============================================================================
# Configuration and Auth
# =============================================================================

@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(jwt_secret=TEST_SECRET)


@pytest.fixture
def auth_module(auth_config) -> AuthModule:
    return AuthModule(auth_config)


@pytest.fixture
def admin_token(auth_module) -> str:
    return auth_module.sign_token(ADMIN_EMAIL)


@pytest.fixture
def admin_headers(admin_token) -> Dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def config_provider(tmp_path, auth_config) -> StaticConfigProvider:
    """Configuration with the built-in capabilities and a per-test scratch dir."""
    return StaticConfigProvider(
        api=APIConfig(
            port=8080,
            host="127.0.0.1",
            debug=False,
            log_level="INFO",
            cors_origins=["*"],
        ),
        auth=auth_config,
        registry=RegistryConfig(
            endpoints_dir=DEFAULT_ENDPOINTS_DIR,
            scratch_dir=str(tmp_path / "scratch"),
            enabled_modules=["storage"],
        ),
        audit=AuditConfig(redis_url=None),
    )


# =============================================================================
# Registry and Loader
# =============================================================================

@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def loader(registry, tmp_path) -> DynamicLoader:
    return DynamicLoader(registry, scratch_dir=str(tmp_path / "scratch"))


@pytest.fixture
def make_definition() -> Callable[..., CapabilityDefinition]:
    """
    Factory for definitions built directly, without going through the loader.

    Usage:
        def test_something(make_definition):
            definition = make_definition("ping", handler=lambda ctx: "pong")
    """

    def factory(
        opcode: str,
        kind: str = "reporter",
        handler: Optional[Callable[[Any], Any]] = None,
        schema: Optional[Dict[str, Any]] = None,
        text: Optional[str] = None,
        auth_required: bool = False,
        required_modules=(),
    ) -> CapabilityDefinition:
        return CapabilityDefinition(
            opcode=opcode,
            kind=BlockKind(kind),
            text=text if text is not None else opcode,
            handler=handler or (lambda context: {"opcode": opcode}),
            schema=normalize_schema(schema),
            auth_required=auth_required,
            required_modules=frozenset(required_modules),
        )

    return factory


# =============================================================================
# Application
# =============================================================================

@pytest.fixture
def app(config_provider):
    from blockapi.main import create_app

    return create_app(config_provider)


@pytest.fixture
def client(app):
    """Test client with the lifespan run (built-in capabilities loaded)."""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests exercising the full application"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
