"""
Capability Module - Black Box Interface

Purpose: Describe what a capability is
Interface: Capability, capability(), Block, BlockKind, CapabilityDefinition,
           ParamSpec, RawResponse, error classes
Hidden: Schema normalization, request model construction

Capability source files (built-in or hot-registered) import only from here.
"""

from .definition import (
    Block,
    BlockKind,
    Capability,
    CapabilityDefinition,
    RawResponse,
    capability,
)
from .errors import (
    AuthenticationError,
    CapabilityError,
    LoadError,
    ModuleUnavailableError,
    NotFoundError,
    RegistrationError,
    RequestValidationError,
)
from .schema import MISSING, ParamSpec, build_request_model, normalize_schema

__all__ = [
    "Block",
    "BlockKind",
    "Capability",
    "CapabilityDefinition",
    "RawResponse",
    "capability",
    "ParamSpec",
    "MISSING",
    "build_request_model",
    "normalize_schema",
    "CapabilityError",
    "RequestValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ModuleUnavailableError",
    "RegistrationError",
    "LoadError",
]
