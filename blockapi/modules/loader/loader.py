"""
Dynamic capability loader.

Turns Python source (an uploaded string or a file on disk) into a
CapabilityDefinition and installs it in the registry. Loaded code runs with
full process privileges; hot registration is only reachable by authenticated
callers.

Design Principles:
- All slow work (file write, import, metadata production) happens before the
  registry is touched; the swap itself never awaits
- Every failure of register_source() comes back as a LoadResult
- Scratch files never outlive the call that created them
"""

import asyncio
import importlib.util
import logging
import os
import sys
import tempfile
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Optional, Union

from ..capability import Capability, CapabilityDefinition, LoadError, RegistrationError
from ..pipeline import RequestContext
from ..registry import Registry

logger = logging.getLogger("blockapi.loader")


@dataclass
class LoadResult:
    """Outcome of a hot registration."""

    success: bool
    opcode: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _import_source(path: Path, module_name: str) -> ModuleType:
    """Execute a source file as an isolated module."""
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise LoadError(f"Cannot import {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except (Exception, SystemExit) as e:
        raise LoadError(f"Failed to evaluate source: {type(e).__name__}: {e}") from e
    finally:
        # Each load gets a fresh module; nothing is cached between loads
        sys.modules.pop(module_name, None)
    return module


def find_capability(module: ModuleType, logical_id: Optional[str] = None) -> Capability:
    """
    Pick the Capability exported by a module.

    An export named after the logical identifier wins; otherwise the first
    exported Capability in definition order is used.

    Raises:
        LoadError: If the module exports no Capability
    """
    exports = [
        (name, value)
        for name, value in vars(module).items()
        if isinstance(value, Capability) and not name.startswith("_")
    ]
    if not exports:
        raise LoadError("Source does not export a Capability")

    for name, value in exports:
        if name == logical_id:
            return value
    return exports[0][1]


class DynamicLoader:
    """Loads capability source into the registry."""

    def __init__(self, registry: Registry, audit=None, scratch_dir: Optional[str] = None):
        """
        Initialize loader.

        Args:
            registry: Registry receiving loaded definitions
            audit: AuditLog recording registrations (optional)
            scratch_dir: Directory for temporary source files (default: system temp)
        """
        self.registry = registry
        self.audit = audit
        self.scratch_dir = scratch_dir

    async def _load(self, path: Path, logical_id: Optional[str]) -> CapabilityDefinition:
        module_name = f"blockapi_endpoint_{logical_id or 'source'}_{uuid.uuid4().hex}"
        module = await asyncio.to_thread(_import_source, path, module_name)
        marker = find_capability(module, logical_id)

        try:
            return await marker.resolve(RequestContext())
        except LoadError:
            raise
        except (Exception, SystemExit) as e:
            raise LoadError(f"Failed to produce endpoint metadata: {type(e).__name__}: {e}") from e

    async def load_file(self, path: Union[str, Path]) -> CapabilityDefinition:
        """
        Load a capability file from disk without registering it.

        The file stem is the logical identifier used to pick the export.

        Raises:
            LoadError: If the file cannot be turned into a definition
        """
        path = Path(path)
        if not path.is_file():
            raise LoadError(f"Endpoint file {path} does not exist")
        definition = await self._load(path, path.stem)
        logger.debug(f"Loaded {definition.path} from {path.name}")
        return definition

    def _create_scratch_file(self) -> Path:
        if self.scratch_dir:
            os.makedirs(self.scratch_dir, exist_ok=True)
        fd, name = tempfile.mkstemp(suffix=".py", prefix="endpoint_", dir=self.scratch_dir)
        os.close(fd)
        return Path(name)

    @staticmethod
    def _write_source(path: Path, source: str) -> None:
        try:
            path.write_text(source, encoding="utf-8")
        except UnicodeEncodeError as e:
            raise LoadError(f"Source is not valid UTF-8 text: {e}") from e

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove scratch file {path}: {e}")

    async def register_source(self, source: str, request_id: Optional[str] = None) -> LoadResult:
        """
        Register a capability from raw source text.

        Args:
            source: Python source exporting a Capability
            request_id: Request that asked for the registration (for the audit trail)

        Returns:
            LoadResult; failures are reported, never raised
        """
        if not isinstance(source, str) or not source.strip():
            return LoadResult(success=False, error="Source cannot be empty")

        path: Optional[Path] = None
        try:
            # The path exists before anything is written, so cleanup covers write failures
            path = await asyncio.to_thread(self._create_scratch_file)
            await asyncio.to_thread(self._write_source, path, source)
            definition = await self._load(path, None)
            if not definition.opcode:
                raise LoadError("Endpoint opcode cannot be empty")
            self.registry.upsert(definition.opcode, definition)
        except (LoadError, RegistrationError, OSError, ValueError) as e:
            logger.warning(f"Hot registration failed (request {request_id}): {e}")
            return LoadResult(success=False, error=str(e))
        finally:
            if path is not None:
                self._discard(path)

        if self.audit is not None:
            await self.audit.record(
                "endpoint_registered",
                {"opcode": definition.opcode, "method": definition.method, "text": definition.text},
                request_id=request_id,
            )

        return LoadResult(
            success=True,
            opcode=definition.opcode,
            message=f'Endpoint "{definition.opcode}" registered successfully',
        )
