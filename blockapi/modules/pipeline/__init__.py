"""
Pipeline Module - Black Box Interface

Purpose: Prepare every request before its handler runs
Interface: RequestContext, Pipeline.run(), create_pipeline(), the stage classes,
           SchemaValidator
Hidden: Request id assignment, access log format, token checks, coercion rules

Stages can be reordered, replaced or extended without touching the dispatcher.
"""

from .context import RequestContext
from .stages import (
    REQUEST_ID_HEADER,
    AuthStage,
    LoggingStage,
    Pipeline,
    RequirementsStage,
    ValidationStage,
    create_pipeline,
    error_response,
)
from .validation import SchemaValidator

__all__ = [
    "RequestContext",
    "Pipeline",
    "create_pipeline",
    "error_response",
    "LoggingStage",
    "AuthStage",
    "RequirementsStage",
    "ValidationStage",
    "SchemaValidator",
    "REQUEST_ID_HEADER",
]
