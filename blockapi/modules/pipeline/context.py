"""
Per-request context.

Created by the dispatcher for each request, filled in by the pipeline stages
and handed to the handler. Never shared between requests, never persisted.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from ..capability import CapabilityDefinition
    from ..services import Services


@dataclass
class RequestContext:
    """
    Everything a handler knows about the request it is serving.

    RequestContext() with no arguments is the empty context used when
    producing capability metadata outside of a request.
    """

    request_id: Optional[str] = None
    method: str = "GET"
    path: str = "/"
    headers: Mapping[str, str] = field(default_factory=dict)
    raw_query: Dict[str, str] = field(default_factory=dict)
    raw_body: Any = None
    body_error: Optional[str] = None

    # Set by the auth stage
    user_email: Optional[str] = None
    claims: Optional[Dict[str, Any]] = None

    # Set by the validation stage only when validation succeeds
    validated_body: Optional[Dict[str, Any]] = None

    opcode: Optional[str] = None
    definition: Optional["CapabilityDefinition"] = None
    services: Optional["Services"] = None

    @property
    def inputs(self) -> Dict[str, Any]:
        """Validated parameters (empty before validation)."""
        return self.validated_body or {}

    @property
    def authorization(self) -> Optional[str]:
        return self.headers.get("authorization")
