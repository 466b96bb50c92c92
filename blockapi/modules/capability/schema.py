"""
Parameter schemas for capability blocks.

A block schema maps parameter names to ParamSpec entries using the small JSON
schema dialect capability authors write by hand:

    schema = {
        "to": {"type": "array", "items": {"type": "string"}, "minItems": 1},
        "subject": {"type": "string", "default": ""},
        "options": {"type": "json", "schema": {"type": "object"}},
    }

build_request_model() turns such a schema into a pydantic model that performs
the type coercion and structural checks for one capability.
"""

import copy
import re
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, create_model

PARAM_TYPES = ("string", "number", "integer", "boolean", "array", "object", "json", "any")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

# Fields are stored under positional names and aliased to the parameter name,
# so parameters like "json" or "schema" never collide with BaseModel attributes.
_REQUEST_MODEL_CONFIG = ConfigDict(
    extra="ignore", coerce_numbers_to_str=True, populate_by_name=False
)


@dataclass(frozen=True)
class ParamSpec:
    """Schema of a single block parameter."""

    type: str = "any"
    default: Any = MISSING
    description: Optional[str] = None
    items: Optional["ParamSpec"] = None
    properties: Optional[Mapping[str, "ParamSpec"]] = None
    schema: Optional["ParamSpec"] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    enum: Optional[Tuple[Any, ...]] = None
    required: Optional[bool] = None

    def __post_init__(self):
        if self.type not in PARAM_TYPES:
            raise ValueError(f"Unknown parameter type: {self.type}")
        if self.type == "json" and self.schema is None:
            raise ValueError('Parameter has type "json" but no schema provided')

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def is_required(self) -> bool:
        """A parameter is required unless it has a default or opts out explicitly."""
        if self.required is not None:
            return self.required
        return not self.has_default

    def default_value(self) -> Any:
        """Fresh copy of the default, so handlers can't mutate the shared one."""
        return copy.deepcopy(self.default)

    @classmethod
    def from_dict(cls, data: Any) -> "ParamSpec":
        """
        Build a ParamSpec from its plain-dict form.

        Accepts both camelCase (minItems) and snake_case (min_items) keys.
        An existing ParamSpec is returned unchanged.
        """
        if isinstance(data, ParamSpec):
            return data
        if not isinstance(data, Mapping):
            raise ValueError(f"Parameter schema must be a mapping, got {type(data).__name__}")

        items = data.get("items")
        properties = data.get("properties")
        nested = data.get("schema")
        enum = data.get("enum")

        return cls(
            type=data.get("type", "any"),
            default=data.get("default", MISSING),
            description=data.get("description"),
            items=cls.from_dict(items) if items is not None else None,
            properties=(
                {name: cls.from_dict(spec) for name, spec in properties.items()}
                if properties else None
            ),
            schema=cls.from_dict(nested) if nested is not None else None,
            min_items=data.get("minItems", data.get("min_items")),
            max_items=data.get("maxItems", data.get("max_items")),
            enum=tuple(enum) if enum is not None else None,
            required=data.get("required") if isinstance(data.get("required"), bool) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render back to the plain-dict form used by discovery."""
        result: Dict[str, Any] = {"type": self.type}
        if self.has_default:
            result["default"] = self.default
        if self.description is not None:
            result["description"] = self.description
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.properties:
            result["properties"] = {name: spec.to_dict() for name, spec in self.properties.items()}
        if self.schema is not None:
            result["schema"] = self.schema.to_dict()
        if self.min_items is not None:
            result["minItems"] = self.min_items
        if self.max_items is not None:
            result["maxItems"] = self.max_items
        if self.enum is not None:
            result["enum"] = list(self.enum)
        if self.required is not None:
            result["required"] = self.required
        return result


def normalize_schema(schema: Optional[Mapping[str, Any]]) -> Dict[str, ParamSpec]:
    """Convert a block schema (dicts or ParamSpecs) into name -> ParamSpec."""
    if not schema:
        return {}
    return {name: ParamSpec.from_dict(spec) for name, spec in schema.items()}


def _model_name(name: str) -> str:
    cleaned = re.sub(r"\W", "_", name) or "root"
    return f"{cleaned[0].upper()}{cleaned[1:]}Request"


def _annotation(spec: ParamSpec, owner: str) -> Any:
    if spec.type == "json":
        return _annotation(spec.schema, owner)

    if spec.enum:
        base: Any = Literal[spec.enum]
    elif spec.type == "string":
        base = str
    elif spec.type == "number":
        base = float
    elif spec.type == "integer":
        base = int
    elif spec.type == "boolean":
        base = bool
    elif spec.type == "array":
        base = List[_annotation(spec.items, owner) if spec.items else Any]
    elif spec.type == "object":
        if spec.properties:
            base = build_request_model(f"{owner}_object", spec.properties)
        else:
            base = Dict[str, Any]
    else:
        base = Any

    constraints: Dict[str, Any] = {}
    if spec.min_items is not None:
        constraints["min_length"] = spec.min_items
    if spec.max_items is not None:
        constraints["max_length"] = spec.max_items
    if constraints:
        return Annotated[base, Field(**constraints)]
    return base


def build_request_model(name: str, schema: Mapping[str, ParamSpec]) -> Type[BaseModel]:
    """
    Create the pydantic model validating one capability's parameters.

    Required parameters become required fields; optional ones are nullable with
    their default (or None). Defaults are pre-filled by the validation stage
    before the model runs, so they are validated like supplied values.
    """
    fields: Dict[str, Any] = {}
    for index, (param, spec) in enumerate(schema.items()):
        annotation = _annotation(spec, f"{name}_{param}")
        description = spec.description
        if spec.is_required:
            field_info = Field(..., alias=param, description=description)
        else:
            default = spec.default_value() if spec.has_default else None
            annotation = Optional[annotation]
            field_info = Field(default=default, alias=param, description=description)
        fields[f"p{index}"] = (annotation, field_info)

    return create_model(_model_name(name), __config__=_REQUEST_MODEL_CONFIG, **fields)
