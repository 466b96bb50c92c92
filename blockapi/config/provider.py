"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

# Built-in capability definitions shipped with the package
DEFAULT_ENDPOINTS_DIR = str(Path(__file__).resolve().parent.parent / "capabilities")

# Shared modules living next to capability files that are not capabilities themselves
DEFAULT_RESERVED_MODULES = ["__init__", "common"]


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str
    cors_origins: List[str]


@dataclass
class AuthConfig:
    """Authentication configuration."""
    jwt_secret: Optional[str]
    algorithm: str = "HS256"
    token_ttl_seconds: int = 30 * 24 * 3600

    @property
    def is_configured(self) -> bool:
        """Check if bearer token validation is possible."""
        return bool(self.jwt_secret)


@dataclass
class RegistryConfig:
    """Capability registry configuration."""
    endpoints_dir: Optional[str]
    reserved_names: List[str] = field(default_factory=lambda: list(DEFAULT_RESERVED_MODULES))
    scratch_dir: Optional[str] = None
    enabled_modules: List[str] = field(default_factory=list)


@dataclass
class AuditConfig:
    """Audit trail configuration."""
    redis_url: Optional[str]
    list_key: str = "registry:audit"
    max_entries: int = 10000

    @property
    def is_configured(self) -> bool:
        return bool(self.redis_url)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...

    def get_registry_config(self) -> RegistryConfig:
        """Get registry configuration."""
        ...

    def get_audit_config(self) -> AuditConfig:
        """Get audit configuration."""
        ...


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "8080")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_origins=os.getenv("CORS_ORIGINS", "*").split(","),
        )

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        # No default secret: without one every auth-required route answers 401
        return AuthConfig(
            jwt_secret=os.getenv("JWT_SECRET") or None,
            algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            token_ttl_seconds=int(os.getenv("JWT_TTL_SECONDS", str(30 * 24 * 3600))),
        )

    def get_registry_config(self) -> RegistryConfig:
        """Get registry configuration from environment variables."""
        reserved = os.getenv("RESERVED_MODULES")
        return RegistryConfig(
            endpoints_dir=os.getenv("ENDPOINTS_DIR", DEFAULT_ENDPOINTS_DIR),
            reserved_names=_split_list(reserved) if reserved else list(DEFAULT_RESERVED_MODULES),
            scratch_dir=os.getenv("SCRATCH_DIR") or None,
            enabled_modules=_split_list(os.getenv("ENABLED_MODULES", "")),
        )

    def get_audit_config(self) -> AuditConfig:
        """Get audit configuration from environment variables."""
        return AuditConfig(
            redis_url=os.getenv("REDIS_URL") or None,
            list_key=os.getenv("AUDIT_LIST_KEY", "registry:audit"),
            max_entries=int(os.getenv("AUDIT_MAX_ENTRIES", "10000")),
        )


@dataclass
class StaticConfigProvider:
    """Provider returning fixed configuration objects (embedding and tests)."""
    api: APIConfig
    auth: AuthConfig
    registry: RegistryConfig
    audit: AuditConfig

    def get_api_config(self) -> APIConfig:
        return self.api

    def get_auth_config(self) -> AuthConfig:
        return self.auth

    def get_registry_config(self) -> RegistryConfig:
        return self.registry

    def get_audit_config(self) -> AuditConfig:
        return self.audit
