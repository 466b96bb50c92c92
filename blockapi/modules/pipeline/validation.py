"""
Schema validation for capability requests.

Reporter (GET) parameters come from the query string and are therefore all
strings; Command (POST) parameters come from the JSON body. Both go through
the same steps:

1. pick the schema fields out of the source, treating None and "" as missing
2. fill missing fields from their defaults
3. parse "json" parameters, and arrays/objects that arrive JSON-encoded
4. coerce and check everything with the definition's pydantic model

Only fields that end up with a value are passed on to the handler.
"""

import json
import logging
from typing import Any, Dict, Mapping

from pydantic import ValidationError

from ..capability import CapabilityDefinition, ParamSpec, RequestValidationError
from ..capability.definition import BlockKind
from .context import RequestContext

logger = logging.getLogger("blockapi.pipeline.validation")

_JSON_ENCODED_TYPES = ("array", "object")


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _format_location(loc) -> str:
    return ".".join(str(part) for part in loc)


class SchemaValidator:
    """Validates and coerces request data against a capability schema."""

    def source_for(self, definition: CapabilityDefinition, context: RequestContext) -> Mapping[str, Any]:
        """
        Raw parameter source for a request.

        Raises:
            RequestValidationError: If a command body is not a JSON object
        """
        if definition.kind is BlockKind.REPORTER:
            return context.raw_query

        if context.body_error:
            raise RequestValidationError(None, context.body_error)
        body = context.raw_body
        if body is None:
            return {}
        if not isinstance(body, dict):
            raise RequestValidationError(None, "Request body must be a JSON object")
        return body

    def _prepare(self, name: str, spec: ParamSpec, value: Any) -> Any:
        if not isinstance(value, str):
            return value

        if spec.type == "json":
            try:
                return json.loads(value)
            except ValueError as e:
                raise RequestValidationError(name, f"Invalid JSON for {name}: {e}")

        if spec.type in _JSON_ENCODED_TYPES:
            # Query strings can only carry structured values JSON-encoded
            try:
                return json.loads(value)
            except ValueError:
                return value

        return value

    def validate(self, definition: CapabilityDefinition, context: RequestContext) -> Dict[str, Any]:
        """
        Validate a request against a definition's schema.

        Args:
            definition: Capability being requested
            context: Request context holding the raw query/body

        Returns:
            Validated parameters, keyed by parameter name

        Raises:
            RequestValidationError: Naming the first failing field
        """
        source = self.source_for(definition, context)
        schema = definition.schema
        if not schema:
            return {}

        data: Dict[str, Any] = {}

        for name, spec in schema.items():
            value = source.get(name)
            if _is_missing(value):
                if spec.has_default:
                    value = spec.default_value()
                elif spec.is_required:
                    raise RequestValidationError(name, f"Missing required property: {name}")
                else:
                    continue
            data[name] = self._prepare(name, spec, value)

        try:
            model = definition.request_model.model_validate(data)
        except ValidationError as e:
            error = e.errors()[0]
            loc = error.get("loc", ())
            field = str(loc[0]) if loc else None
            location = _format_location(loc) or "request"
            raise RequestValidationError(
                field, f"Validation failed for {location}: {error.get('msg')}"
            )

        validated = model.model_dump(by_alias=True)
        return {name: value for name, value in validated.items() if name in data}
