"""Response recovery: turn raw model text into typed, named item instances.

Stages:
- strip markdown fences
- dispatch on requested count (single object vs. top-level array)
- split the array into object fragments without a full parser
- per fragment: enum name -> ordinal normalization, structured parse onto a
  fresh instance, display-name extraction and sanitization

A failing fragment in a batch is dropped and recorded as a diagnostic; a
failure of the whole response raises ParseError.
"""

import json
import logging
import re
import uuid
from enum import Enum
from typing import Any, List, Literal, Optional, Type, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..models.generation import RecoveredItem
from ..models.schema import FieldSchema, TypeSchema
from .errors import ParseError, PartialElementError
from .json_utils import clean_markdown, split_top_level_array
from .schema import extract_schema, unwrap_optional

logger = logging.getLogger(__name__)

# Checked in order against the raw fragment text
NAME_CANDIDATES = (
    "name",
    "displayName",
    "display_name",
    "itemName",
    "item_name",
    "weaponName",
    "title",
)


class RecoveryOutcome(BaseModel):
    """Items recovered from one response plus per-element diagnostics."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[RecoveredItem] = Field(default_factory=list)
    diagnostics: List[str] = Field(default_factory=list)
    fragment_count: int = 0


def normalize_enums(fragment: str, schema: TypeSchema) -> str:
    """Rewrite ``"field":"Value"`` as ``"field":ordinal`` for enum fields.

    The ordinal is the value's position in the schema's enum order. Values
    that are not listed are left untouched.
    """
    for field in schema.enum_fields():
        for ordinal, value in enumerate(field.enum_values):
            pattern = re.compile(r'"%s"\s*:\s*"%s"' % (re.escape(field.name), re.escape(value)))
            replacement = f'"{field.name}":{ordinal}'
            fragment, count = pattern.subn(lambda _m: replacement, fragment)
            if count:
                logger.debug(f"Converted enum field '{field.name}' from '{value}' to {ordinal}")
    return fragment


def extract_display_name(fragment: str) -> Optional[str]:
    """Find a display name in raw JSON text via the candidate key chain."""
    for key in NAME_CANDIDATES:
        match = re.search(r'"%s"\s*:\s*"([^"]+)"' % re.escape(key), fragment)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def sanitize_name(name: str) -> str:
    """Make a display name safe for identifiers and file names.

    Anything other than a letter, digit, underscore or hyphen becomes an
    underscore; a leading digit gets an underscore prefix.
    """
    if not name or not name.strip():
        return "Unnamed"
    result = "".join(ch if ch.isalnum() or ch in "_-" else "_" for ch in name.strip())
    if result[0].isdigit():
        result = "_" + result
    return result


def synthesize_name(type_name: str) -> str:
    return f"{type_name}_{uuid.uuid4().hex[:8]}"


class ResponseRecoveryEngine:
    """Recovers instances of one target model from model responses."""

    def __init__(self, target: Type[BaseModel], schema: Optional[TypeSchema] = None):
        self.target = target
        self.schema = schema or extract_schema(target)

    def recover(self, text: str, count: int) -> RecoveryOutcome:
        """Recover up to ``count`` items from a raw response text."""
        cleaned = clean_markdown(text)
        if not cleaned:
            raise ParseError("Response contained no JSON content.")

        logger.debug(f"Raw response:\n{cleaned}")

        if count == 1:
            return self._recover_single(cleaned)
        return self._recover_batch(cleaned, count)

    def _recover_single(self, cleaned: str) -> RecoveryOutcome:
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid JSON ({e.msg} at position {e.pos})") from e
        if not isinstance(data, dict):
            raise ParseError("Expected a single JSON object for a single-item request.")

        try:
            item = self.recover_element(cleaned, 0)
        except PartialElementError as e:
            raise ParseError(f"Failed to recover {self.schema.type_name}: {e}", [str(e)]) from e
        return RecoveryOutcome(items=[item], fragment_count=1)

    def _recover_batch(self, cleaned: str, count: int) -> RecoveryOutcome:
        fragments = split_top_level_array(cleaned)
        logger.debug(f"Parsing {len(fragments)} elements for {count} requested items")

        items: List[RecoveredItem] = []
        diagnostics: List[str] = []
        for index, fragment in enumerate(fragments):
            try:
                items.append(self.recover_element(fragment, index))
            except PartialElementError as e:
                message = f"Element {index + 1}: {e}"
                logger.warning(f"Dropped {self.schema.type_name} {message.lower()}")
                diagnostics.append(message)

        if fragments and not items:
            raise ParseError(
                f"None of the {len(fragments)} elements could be recovered as {self.schema.type_name}.",
                diagnostics,
            )

        if len(items) > count:
            logger.warning(f"Response contained {len(items)} items, keeping the first {count}")
            items = items[:count]

        return RecoveryOutcome(items=items, diagnostics=diagnostics, fragment_count=len(fragments))

    def recover_element(self, fragment: str, index: int = 0) -> RecoveredItem:
        """Normalize, parse and name a single object fragment."""
        normalized = normalize_enums(fragment, self.schema)
        instance = self._overlay(normalized, index)

        name = extract_display_name(fragment)
        name = sanitize_name(name) if name else synthesize_name(self.schema.type_name)
        logger.debug(f"Recovered {self.schema.type_name}: {name}")
        return RecoveredItem(name=name, instance=instance, source=fragment)

    def _overlay(self, fragment: str, index: int) -> BaseModel:
        try:
            data = json.loads(fragment)
        except json.JSONDecodeError as e:
            raise PartialElementError(f"invalid JSON ({e.msg} at position {e.pos})", index, fragment) from e
        if not isinstance(data, dict):
            raise PartialElementError("element is not a JSON object", index, fragment)

        # Unknown keys are ignored, missing keys keep the model defaults
        values = {}
        for field in self.schema.fields:
            if field.name not in data:
                continue
            value = data[field.name]
            if field.is_enum and value is not None:
                value = self._enum_member(field, value, index, fragment)
            values[field.name] = value

        try:
            return self.target.model_validate(values)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise PartialElementError(f"validation failed ({errors})", index, fragment) from e

    def _enum_member(self, field: FieldSchema, value: Any, index: int, fragment: str) -> Any:
        if isinstance(value, bool) or not isinstance(value, int):
            raise PartialElementError(
                f"enum field '{field.name}' has unrecognized value {value!r}", index, fragment)
        if not 0 <= value < len(field.enum_values):
            raise PartialElementError(
                f"enum field '{field.name}' ordinal {value} out of range", index, fragment)

        option = field.enum_values[value]
        annotation = unwrap_optional(self.target.model_fields[field.name].annotation)
        if isinstance(annotation, type) and issubclass(annotation, Enum):
            if option not in annotation.__members__:
                raise PartialElementError(
                    f"enum field '{field.name}' has no member '{option}'", index, fragment)
            return annotation[option]
        if get_origin(annotation) is Literal:
            for literal in get_args(annotation):
                if str(literal) == option:
                    return literal
        return option
