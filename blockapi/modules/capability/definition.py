"""
Capability data model.

A capability source module exports a Capability: the declared marker pairing a
metadata producer (block) with a handler. Registration resolves the metadata
once and freezes the result into a CapabilityDefinition, which is what the
registry stores and the dispatcher runs.

Design Principles:
- Definitions are immutable: replacing one means installing a new object
- Metadata production must not depend on request-scoped data
- Handlers receive a RequestContext and return a value or a RawResponse
"""

import inspect
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Type, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from .schema import ParamSpec, build_request_model, normalize_schema


class BlockKind(str, Enum):
    """Kind of block; determines the HTTP verb of its route."""

    COMMAND = "command"
    REPORTER = "reporter"

    @property
    def method(self) -> str:
        return "POST" if self is BlockKind.COMMAND else "GET"


@dataclass(frozen=True)
class Block:
    """Metadata describing a capability."""

    opcode: str
    kind: BlockKind
    text: str
    schema: Mapping[str, ParamSpec] = field(default_factory=dict)

    def __post_init__(self):
        # Accept "command"/"reporter" strings and dict-form schemas from authors
        object.__setattr__(self, "kind", BlockKind(self.kind))
        object.__setattr__(self, "schema", normalize_schema(self.schema))


BlockProducer = Union[Block, Callable[[Any], Union[Block, Awaitable[Block]]]]
Handler = Callable[[Any], Any]


@dataclass(frozen=True, eq=False)
class CapabilityDefinition:
    """Resolved, immutable capability: metadata plus handler."""

    opcode: str
    kind: BlockKind
    text: str
    handler: Handler
    schema: Mapping[str, ParamSpec] = field(default_factory=dict)
    auth_required: bool = True
    required_modules: FrozenSet[str] = frozenset()

    @property
    def method(self) -> str:
        return self.kind.method

    @property
    def path(self) -> str:
        return f"/{self.opcode}"

    @property
    def is_root(self) -> bool:
        return self.opcode == ""

    @cached_property
    def request_model(self) -> Type[BaseModel]:
        """Pydantic model validating this capability's parameters (built once)."""
        return build_request_model(self.opcode or "root", self.schema)

    def describe(self) -> Dict[str, Any]:
        """Discovery entry for this definition."""
        return {
            "method": self.method,
            "path": self.path,
            "opcode": self.opcode,
            "blockType": self.kind.value,
            "text": self.text,
            "schema": {name: spec.to_dict() for name, spec in self.schema.items()} or None,
            "requiresAuth": self.auth_required,
        }


@dataclass(frozen=True)
class Capability:
    """
    Marker exported by capability source modules.

    Example:
        >>> ping = Capability(
        ...     block=Block(opcode="ping", kind="reporter", text="ping"),
        ...     handler=lambda context: "pong",
        ...     auth_required=False,
        ... )
    """

    block: BlockProducer
    handler: Handler
    auth_required: bool = True
    required_modules: Iterable[str] = ()

    async def produce_block(self, context: Any) -> Block:
        """Run the metadata producer for the given context."""
        block = self.block
        if inspect.iscoroutinefunction(block):
            block = await block(context)
        elif callable(block) and not isinstance(block, Block):
            block = await run_in_threadpool(block, context)
            if inspect.isawaitable(block):
                block = await block
        if not isinstance(block, Block):
            raise TypeError(f"Block producer returned {type(block).__name__}, expected Block")
        return block

    async def resolve(self, context: Any) -> CapabilityDefinition:
        """Produce the metadata and freeze it into a CapabilityDefinition."""
        block = await self.produce_block(context)
        definition = CapabilityDefinition(
            opcode=block.opcode or "",
            kind=block.kind,
            text=block.text,
            handler=self.handler,
            schema=block.schema,
            auth_required=self.auth_required,
            required_modules=frozenset(self.required_modules),
        )
        # Fail on a broken schema here rather than on the first request
        definition.request_model
        return definition


@dataclass(frozen=True)
class RawResponse:
    """
    Explicit response descriptor returned by handlers that need full control
    over status, headers or a non-JSON body (HTML, CSS, binary exports).
    """

    body: Union[str, bytes] = b""
    status: int = 200
    headers: Optional[Mapping[str, str]] = None
    media_type: Optional[str] = None


def capability(
    block: BlockProducer,
    auth_required: bool = True,
    required_modules: Iterable[str] = (),
) -> Callable[[Handler], Capability]:
    """Decorator form: turn a handler function into a Capability."""

    def decorator(handler: Handler) -> Capability:
        return Capability(
            block=block,
            handler=handler,
            auth_required=auth_required,
            required_modules=tuple(required_modules),
        )

    return decorator
