"""
blockapi wire models.

These models define the JSON documents exchanged with clients by the
built-in capabilities and the error envelope used everywhere.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Request Models (API Input)


class RegisterEndpointRequest(BaseModel):
    """Hot registration request."""

    source: str = Field(..., description="Python source exporting a Capability")

    @field_validator("source")
    @classmethod
    def source_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Source cannot be empty")
        return value


class RemoveEndpointRequest(BaseModel):
    """Explicit removal request."""

    opcode: str = Field(..., description="Opcode to remove")


# Response Models (API Output)


class EndpointInfo(BaseModel):
    """Discovery entry for one registered capability."""

    model_config = ConfigDict(populate_by_name=True)

    method: str
    path: str
    opcode: str
    block_type: str = Field(..., alias="blockType")
    text: str
    params: Optional[Dict[str, Any]] = Field(default=None, alias="schema")
    requires_auth: bool = Field(..., alias="requiresAuth")


class RegistrationResult(BaseModel):
    """Outcome of a hot registration; always delivered with HTTP 200."""

    success: bool
    opcode: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


class RemovalResult(BaseModel):
    """Outcome of an explicit removal."""

    success: bool
    opcode: str
    removed: bool = Field(..., description="Whether the opcode was registered")


class HealthResponse(BaseModel):
    """Runtime health summary."""

    status: str = Field(default="healthy", description="Health status")
    endpoints: int = Field(..., description="Number of registered endpoints")
    modules: List[str] = Field(default_factory=list, description="Enabled service modules")
    version: str = Field(default="1.0.0", description="API version")


# Error Models


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    field: Optional[str] = Field(default=None, description="Parameter that failed validation")
    code: Optional[str] = Field(default=None, description="Machine readable error code")
