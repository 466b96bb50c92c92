"""
Unit tests for configuration loading.
"""

from blockapi.config.provider import (
    DEFAULT_ENDPOINTS_DIR,
    DEFAULT_RESERVED_MODULES,
    AuditConfig,
    AuthConfig,
    EnvConfigProvider,
)

ENV_VARS = [
    "API_HOST", "API_PORT", "API_DEBUG", "LOG_LEVEL", "CORS_ORIGINS",
    "JWT_SECRET", "JWT_ALGORITHM", "JWT_TTL_SECONDS",
    "ENDPOINTS_DIR", "RESERVED_MODULES", "SCRATCH_DIR", "ENABLED_MODULES",
    "REDIS_URL", "AUDIT_LIST_KEY", "AUDIT_MAX_ENTRIES",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestEnvConfigProvider:
    """Test environment variable parsing."""

    def test_defaults(self, monkeypatch):
        clear_env(monkeypatch)
        provider = EnvConfigProvider()

        api = provider.get_api_config()
        assert api.port == 8080
        assert api.host == "0.0.0.0"
        assert api.debug is False
        assert api.cors_origins == ["*"]

        auth = provider.get_auth_config()
        assert auth.jwt_secret is None
        assert auth.algorithm == "HS256"
        assert auth.is_configured is False

        registry = provider.get_registry_config()
        assert registry.endpoints_dir == DEFAULT_ENDPOINTS_DIR
        assert registry.reserved_names == DEFAULT_RESERVED_MODULES
        assert registry.scratch_dir is None
        assert registry.enabled_modules == []

        audit = provider.get_audit_config()
        assert audit.redis_url is None
        assert audit.list_key == "registry:audit"
        assert audit.max_entries == 10000

    def test_overrides(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("API_PORT", "9000")
        monkeypatch.setenv("API_DEBUG", "true")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        monkeypatch.setenv("JWT_TTL_SECONDS", "60")
        monkeypatch.setenv("ENDPOINTS_DIR", "/srv/endpoints")
        monkeypatch.setenv("RESERVED_MODULES", "common, helpers")
        monkeypatch.setenv("ENABLED_MODULES", "gsuite,storage")
        monkeypatch.setenv("REDIS_URL", "redis://redis:6379/1")
        monkeypatch.setenv("AUDIT_MAX_ENTRIES", "25")

        provider = EnvConfigProvider()

        api = provider.get_api_config()
        assert api.port == 9000
        assert api.debug is True
        assert api.cors_origins == ["https://a.example", "https://b.example"]

        auth = provider.get_auth_config()
        assert auth.jwt_secret == "s3cret"
        assert auth.token_ttl_seconds == 60

        registry = provider.get_registry_config()
        assert registry.endpoints_dir == "/srv/endpoints"
        assert registry.reserved_names == ["common", "helpers"]
        assert registry.enabled_modules == ["gsuite", "storage"]

        audit = provider.get_audit_config()
        assert audit.is_configured is True
        assert audit.max_entries == 25

    def test_empty_secret_means_unconfigured(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("JWT_SECRET", "")

        assert EnvConfigProvider().get_auth_config().is_configured is False


class TestConfigObjects:
    def test_auth_config_default_ttl(self):
        assert AuthConfig(jwt_secret="x").token_ttl_seconds == 30 * 24 * 3600

    def test_audit_config_without_url(self):
        assert AuditConfig(redis_url=None).is_configured is False
