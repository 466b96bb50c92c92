"""
Route table derived from the capability registry.

The table is never authoritative: it is rebuilt from the registry after every
mutation and swapped in with a single assignment, so a concurrent lookup sees
either the old table or the new one.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

if TYPE_CHECKING:
    from .registry import Registry

logger = logging.getLogger("blockapi.registry.routes")


@dataclass(frozen=True)
class Route:
    """A single (method, path) -> opcode entry."""

    method: str
    path: str
    opcode: str


def route_path(opcode: str) -> str:
    """Path for an opcode; the root opcode maps to "/"."""
    return f"/{opcode}"


class RouteTable:
    """(method, path) -> opcode mapping, rebuilt wholesale on registry changes."""

    def __init__(self):
        self._routes: Dict[Tuple[str, str], str] = {}

    def rebuild(self, registry: "Registry") -> None:
        """
        Derive the table from the registry and swap it in.

        Args:
            registry: Source of truth for definitions
        """
        routes: Dict[Tuple[str, str], str] = {}
        claimed: Dict[str, str] = {}

        for opcode, definition in registry.items():
            path = route_path(opcode)
            if path in claimed:
                logger.error(
                    f"Skipping route for opcode {opcode!r}: path {path} already "
                    f"claimed by {claimed[path]!r}"
                )
                continue
            if opcode != definition.opcode:
                logger.error(
                    f"Skipping route for opcode {opcode!r}: definition declares "
                    f"{definition.opcode!r}"
                )
                continue
            claimed[path] = opcode
            routes[(definition.method, path)] = opcode

        self._routes = routes
        logger.debug(f"Route table rebuilt with {len(routes)} routes")

    def resolve(self, method: str, path: str) -> Optional[str]:
        """Look up the opcode routed at (method, path)."""
        return self._routes.get((method.upper(), path))

    def allowed_methods(self, path: str) -> Set[str]:
        """Methods routed for a path (used to tell 405 from 404)."""
        routes = self._routes
        return {method for (method, route), _ in routes.items() if route == path}

    def routes(self) -> List[Route]:
        """Snapshot of all routes."""
        return [
            Route(method=method, path=path, opcode=opcode)
            for (method, path), opcode in self._routes.items()
        ]

    def __len__(self) -> int:
        return len(self._routes)
