"""Schema extraction from pydantic models and the prompt-facing renderings of it."""

import importlib
import inspect
import json
import logging
import types
from decimal import Decimal
from enum import Enum
from typing import Any, List, Literal, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..models.schema import NUMERIC_KINDS, Constraint, FieldKind, FieldSchema, TypeSchema
from .errors import InputValidationError

logger = logging.getLogger(__name__)

_UNION_TYPES: Tuple[Any, ...] = (Union,)
if hasattr(types, "UnionType"):
    _UNION_TYPES += (types.UnionType,)


def import_target(path: str) -> Type[BaseModel]:
    """Import a model class from ``package.module:ClassName``."""
    if not path or not path.strip():
        raise InputValidationError("Target import path is empty.")

    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise InputValidationError(f"Invalid target '{path}', expected 'package.module:ClassName'.")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InputValidationError(f"Cannot import module '{module_name}': {e}") from e

    target = getattr(module, attr, None)
    if not (inspect.isclass(target) and issubclass(target, BaseModel)):
        raise InputValidationError(f"'{path}' is not a pydantic model class.")
    return target


def extract_schema(target: Any) -> TypeSchema:
    """Build a TypeSchema from a pydantic model class (or instance)."""
    if isinstance(target, BaseModel):
        target = type(target)
    if target is None or not (inspect.isclass(target) and issubclass(target, BaseModel)):
        raise InputValidationError("Schema source must be a pydantic model class.")

    schema = TypeSchema(
        type_name=target.__name__,
        description=_type_description(target),
    )
    for name, info in target.model_fields.items():
        if name.startswith("_") or info.exclude:
            continue
        schema.fields.append(_extract_field(name, info))

    logger.debug(f"Extracted schema for {schema.type_name}: {', '.join(schema.field_names())}")
    return schema


def _extract_field(name: str, info: FieldInfo) -> FieldSchema:
    annotation = unwrap_optional(info.annotation)
    kind = _json_kind(annotation)
    metadata = list(info.metadata)

    field = FieldSchema(
        name=name,
        kind=kind,
        description=info.description or info.title or name,
        is_required=True,
    )

    # Explicit constraint wins over generic bounds
    constraint = next((m for m in metadata if isinstance(m, Constraint)), None)
    if constraint is not None:
        if kind in NUMERIC_KINDS:
            field.min_value = constraint.min_value
            field.max_value = constraint.max_value
        if constraint.allowed_values:
            field.enum_values = [str(v) for v in constraint.allowed_values]
        field.is_required = constraint.required

    if kind in NUMERIC_KINDS:
        lower, lower_exclusive, upper = _declared_bounds(metadata)
        # Range hint only applies when both bounds are declared
        if (field.min_value is None or field.max_value is None) and lower is not None and upper is not None:
            if field.min_value is None:
                field.min_value = lower
                field.min_exclusive = lower_exclusive
            if field.max_value is None:
                field.max_value = upper
        if field.min_value is None and lower is not None:
            field.min_value = lower
            field.min_exclusive = lower_exclusive

    options = _closed_set_options(annotation)
    if options:
        field.is_enum = True
        if not field.enum_values:
            field.enum_values = options

    field.default_value = _default_value(field)
    return field


def _type_description(target: Type[BaseModel]) -> str:
    doc = target.__doc__
    if doc:
        paragraph = inspect.cleandoc(doc).split("\n\n")[0]
        return " ".join(paragraph.split())
    return f"A {target.__name__} item definition."


def unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in _UNION_TYPES:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _json_kind(annotation: Any) -> FieldKind:
    origin = get_origin(annotation)
    if origin is Literal:
        return FieldKind.STRING
    if origin in (list, tuple, set, frozenset):
        return FieldKind.ARRAY
    if origin is dict:
        return FieldKind.OBJECT
    if not inspect.isclass(annotation):
        return FieldKind.OBJECT

    # bool is a subclass of int, check it first
    if issubclass(annotation, bool):
        return FieldKind.BOOLEAN
    if issubclass(annotation, Enum):
        return FieldKind.STRING
    if issubclass(annotation, str):
        return FieldKind.STRING
    if issubclass(annotation, int):
        return FieldKind.INTEGER
    if issubclass(annotation, (float, Decimal)):
        return FieldKind.NUMBER
    if issubclass(annotation, (list, tuple, set, frozenset)):
        return FieldKind.ARRAY
    return FieldKind.OBJECT


def _closed_set_options(annotation: Any) -> List[str]:
    if get_origin(annotation) is Literal:
        return [str(v) for v in get_args(annotation)]
    if inspect.isclass(annotation) and issubclass(annotation, Enum):
        return [member.name for member in annotation]
    return []


def _declared_bounds(metadata: List[Any]) -> Tuple[Optional[Any], bool, Optional[Any]]:
    lower = upper = None
    lower_exclusive = False
    for item in metadata:
        if isinstance(item, Constraint):
            continue
        for attr in ("ge", "gt"):
            value = getattr(item, attr, None)
            if value is not None and lower is None:
                lower = value
                lower_exclusive = attr == "gt"
        for attr in ("le", "lt"):
            value = getattr(item, attr, None)
            if value is not None and upper is None:
                upper = value
    return lower, lower_exclusive, upper


def _default_value(field: FieldSchema) -> Any:
    if field.enum_values:
        return field.enum_values[0]
    return {
        FieldKind.STRING: "",
        FieldKind.INTEGER: 0,
        FieldKind.NUMBER: 0.0,
        FieldKind.BOOLEAN: False,
        FieldKind.ARRAY: [],
        FieldKind.OBJECT: {},
    }[field.kind]


def _template_value(field: FieldSchema) -> Any:
    if field.kind == FieldKind.STRING:
        return field.enum_values[0] if field.enum_values else "string"
    if field.kind == FieldKind.INTEGER:
        if field.min_value is None:
            return 0
        return int(field.min_value) + 1 if field.min_exclusive else int(field.min_value)
    if field.kind == FieldKind.NUMBER:
        if field.min_value is None:
            return 0.0
        if not field.min_exclusive:
            return float(field.min_value)
        # Exclusive minimum: step inside the range
        if field.max_value is not None:
            return (field.min_value + field.max_value) / 2
        return float(field.min_value) + 1.0
    if field.kind == FieldKind.BOOLEAN:
        return False
    if field.kind == FieldKind.ARRAY:
        return []
    return {}


def generate_json_template(schema: TypeSchema) -> str:
    """Render a JSON example object with one key per field, in schema order."""
    template = {field.name: _template_value(field) for field in schema.fields}
    return json.dumps(template, indent=2)


def _format_bound(value: Any) -> str:
    if value is None:
        return "any"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def generate_schema_description(schema: TypeSchema) -> str:
    """Render a human-readable field listing for the prompt."""
    lines = [
        f"Item Type: {schema.type_name}",
        f"Description: {schema.description}",
        "Fields:",
    ]
    for field in schema.fields:
        line = f"  - {field.name} ({field.kind.value})"
        if field.has_range:
            line += f" [range: {_format_bound(field.min_value)} to {_format_bound(field.max_value)}]"
        if field.enum_values:
            line += f" [options: {', '.join(field.enum_values)}]"
        if not field.is_required:
            line += " [optional]"
        if field.description and field.description != field.name:
            line += f" - {field.description}"
        lines.append(line)
    return "\n".join(lines)
