"""
API Module - Black Box Interface

Purpose: Shape of the JSON documents clients send and receive
Interface: EndpointInfo, RegisterEndpointRequest, RegistrationResult,
           RemoveEndpointRequest, RemovalResult, HealthResponse, ErrorResponse
Hidden: Field aliases
"""

from .models import (
    EndpointInfo,
    ErrorResponse,
    HealthResponse,
    RegisterEndpointRequest,
    RegistrationResult,
    RemovalResult,
    RemoveEndpointRequest,
)

__all__ = [
    "EndpointInfo",
    "ErrorResponse",
    "HealthResponse",
    "RegisterEndpointRequest",
    "RegistrationResult",
    "RemoveEndpointRequest",
    "RemovalResult",
]
