"""
Capability registry for the blockapi runtime.

Holds the opcode -> CapabilityDefinition map that every request is resolved
against. Definitions arrive from the boot-time directory scan and from hot
registration; both paths end in upsert().

Design Principles:
- Last write wins: re-registering an opcode replaces the old definition
- Copy-on-write: mutations build a new map and swap it in atomically
- The route table is rebuilt synchronously after every mutation
- Only one definition may hold the empty (root) opcode
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Dict, ItemsView, Iterable, List, Optional

from ..capability import CapabilityDefinition, RegistrationError
from .routes import RouteTable

if TYPE_CHECKING:
    from ..loader import DynamicLoader

logger = logging.getLogger("blockapi.registry")

ROOT_OPCODE = ""


class Registry:
    """
    In-memory opcode registry.

    Owned by the server instance and passed by reference to the dispatcher and
    the loader; independent instances never share state.
    """

    def __init__(self, route_table: Optional[RouteTable] = None):
        """
        Initialize registry.

        Args:
            route_table: Route table kept in sync with this registry
        """
        self.route_table = route_table or RouteTable()
        self._definitions: Dict[str, CapabilityDefinition] = {}
        self._lock = threading.RLock()

    def upsert(self, opcode: str, definition: CapabilityDefinition) -> None:
        """
        Insert or replace the definition for an opcode.

        Args:
            opcode: Opcode to register under
            definition: Resolved definition (its opcode must match)

        Raises:
            RegistrationError: On opcode mismatch, or when a root definition
                is already installed and another empty opcode arrives
        """
        if opcode != definition.opcode:
            raise RegistrationError(
                f"Opcode {opcode!r} does not match definition opcode {definition.opcode!r}"
            )

        with self._lock:
            current = self._definitions
            if opcode == ROOT_OPCODE and ROOT_OPCODE in current:
                raise RegistrationError("A root endpoint is already registered")

            replaced = opcode in current
            updated = dict(current)
            updated[opcode] = definition
            self._definitions = updated
            self.route_table.rebuild(self)

        action = "Replaced" if replaced else "Registered"
        logger.info(f"{action} endpoint {definition.path} ({definition.method})")

    def get(self, opcode: str) -> Optional[CapabilityDefinition]:
        """Get the active definition for an opcode, if any."""
        return self._definitions.get(opcode)

    def list(self) -> List[CapabilityDefinition]:
        """
        All active definitions.

        No ordering is guaranteed; callers needing a stable order sort
        themselves (discovery sorts by display text).
        """
        return list(self._definitions.values())

    def items(self) -> ItemsView[str, CapabilityDefinition]:
        return self._definitions.items()

    def remove(self, opcode: str) -> bool:
        """
        Remove an opcode. Idempotent.

        Returns:
            True if a definition was removed, False if none was registered
        """
        with self._lock:
            if opcode not in self._definitions:
                return False
            updated = dict(self._definitions)
            del updated[opcode]
            self._definitions = updated
            self.route_table.rebuild(self)

        logger.info(f"Removed endpoint /{opcode}")
        return True

    async def load_from_directory(
        self,
        directory: str,
        loader: "DynamicLoader",
        reserved_names: Iterable[str] = ("__init__", "common"),
    ) -> List[str]:
        """
        Load and register every capability file in a directory.

        Files named after shared modules are skipped. A file that fails to
        load is logged and skipped; it never aborts the remaining files.

        Args:
            directory: Absolute path of the directory to scan
            loader: Loader implementing the source -> definition contract
            reserved_names: Module names (without .py) that are not capabilities

        Returns:
            Opcodes registered from the directory
        """
        path = Path(directory)
        if not path.is_absolute():
            raise ValueError(f"Expected absolute path, got: {directory}")
        if not path.is_dir():
            logger.error(f"Endpoint directory {directory} does not exist")
            return []

        reserved = set(reserved_names)
        loaded: List[str] = []

        for file_path in sorted(path.glob("*.py")):
            if file_path.stem in reserved:
                logger.debug(f"Skipping shared module {file_path.name}")
                continue
            try:
                definition = await loader.load_file(file_path)
                self.upsert(definition.opcode, definition)
                loaded.append(definition.opcode)
            except Exception as e:
                logger.error(f"Failed to load endpoint from {file_path}: {e}")

        logger.info(f"Loaded {len(loaded)} endpoints from {directory}")
        return loaded

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, opcode: object) -> bool:
        return opcode in self._definitions
