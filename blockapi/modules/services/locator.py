"""Service locator handed to capability handlers through the request context."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, Iterable, List

if TYPE_CHECKING:
    from ..audit import AuditLog
    from ..auth import AuthenticationService
    from ..loader import DynamicLoader
    from ..registry import Registry


@dataclass
class Services:
    """Everything a handler may reach: registry, loader, auth, audit, enabled modules."""

    registry: "Registry"
    loader: "DynamicLoader"
    auth: "AuthenticationService"
    audit: "AuditLog"
    enabled_modules: FrozenSet[str] = field(default_factory=frozenset)
    version: str = "1.0.0"

    def has_module(self, name: str) -> bool:
        return name in self.enabled_modules

    def missing_modules(self, required: Iterable[str]) -> List[str]:
        """Required modules that are not enabled, in sorted order."""
        return sorted(name for name in required if not self.has_module(name))
