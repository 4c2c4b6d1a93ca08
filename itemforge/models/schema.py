"""Portable schema models describing a generation target type."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from pydantic import BaseModel, Field


class FieldKind(str, Enum):
    """JSON kinds a field can map to."""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


NUMERIC_KINDS = (FieldKind.INTEGER, FieldKind.NUMBER)


@dataclass(frozen=True)
class Constraint:
    """Explicit generation constraint attached to a field.

    Attach with ``Annotated``; it takes precedence over any ``ge``/``le``
    bounds declared on the pydantic field::

        damage: Annotated[int, Constraint(min_value=10, max_value=100)] = 10
        weapon_type: Annotated[str, Constraint(allowed_values=("Sword", "Axe"))] = "Sword"
        note: Annotated[str, Constraint(required=False)] = ""
    """
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    allowed_values: Optional[Sequence[str]] = None
    required: bool = True


class FieldSchema(BaseModel):
    """One field of a target type."""
    name: str
    kind: FieldKind
    description: str = ""
    is_required: bool = True
    default_value: Any = None
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    # min_value came from an exclusive (gt) bound
    min_exclusive: bool = False
    enum_values: List[str] = Field(default_factory=list)
    # True only when the underlying type is a closed set (Enum / Literal)
    is_enum: bool = False

    @property
    def has_range(self) -> bool:
        return self.min_value is not None or self.max_value is not None


class TypeSchema(BaseModel):
    """Ordered description of a target type's fields."""
    type_name: str
    description: str = ""
    fields: List[FieldSchema] = Field(default_factory=list)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def enum_fields(self) -> List[FieldSchema]:
        return [f for f in self.fields if f.is_enum and f.enum_values]

    def get_field(self, name: str) -> Optional[FieldSchema]:
        for field in self.fields:
            if field.name == name:
                return field
        return None
