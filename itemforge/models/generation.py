"""Request, result and blueprint models for item generation."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.pricing import calculate_cost


class DuplicateStrategy(str, Enum):
    """How much existing-item context is sent to avoid duplicates."""
    IGNORE = "ignore"
    NAMES_ONLY = "names_only"
    FULL_COMPOSITION = "full_composition"


class FieldOverride(BaseModel):
    """Per-request guidance for a single field."""
    field_name: str
    instruction: str = ""
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    allowed_values: List[str] = Field(default_factory=list)


class GenerationRequest(BaseModel):
    """Everything needed to run one generation call."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    target: Type[BaseModel]
    count: int = 1
    additional_context: str = ""
    existing_items: List[Any] = Field(default_factory=list)
    duplicate_strategy: Optional[DuplicateStrategy] = None
    discovery_scope: Optional[str] = None
    field_overrides: List[FieldOverride] = Field(default_factory=list)

    @classmethod
    def single(cls, target: Type[BaseModel], context: str = "", **kwargs) -> "GenerationRequest":
        return cls(target=target, count=1, additional_context=context, **kwargs)

    @classmethod
    def batch(cls, target: Type[BaseModel], count: int, context: str = "", **kwargs) -> "GenerationRequest":
        return cls(target=target, count=count, additional_context=context, **kwargs)


def dump_item(instance: BaseModel) -> Dict[str, Any]:
    """JSON-ready dict of a model instance with enum fields written by member name.

    Member names are the vocabulary used by schema descriptions, templates
    and enum normalization, so dumped items can be recovered again.
    """
    data = instance.model_dump(mode="json")
    for name in type(instance).model_fields:
        value = getattr(instance, name, None)
        if name in data and isinstance(value, Enum):
            data[name] = value.name
    return data


class RecoveredItem(BaseModel):
    """A typed instance recovered from the model response."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    instance: Any
    source: str = ""

    def to_dict(self) -> dict:
        if isinstance(self.instance, BaseModel):
            return dump_item(self.instance)
        return dict(self.instance)


class GenerationResult(BaseModel):
    """Outcome of one generation request. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    success: bool
    error_message: str = ""
    items: List[RecoveredItem] = Field(default_factory=list)
    prompt_tokens: int = 0
    completion_tokens: int = 0
    estimated_cost: float = 0.0
    model: str = ""
    diagnostics: List[str] = Field(default_factory=list)

    @classmethod
    def failure(cls, message: str, prompt_tokens: int = 0, completion_tokens: int = 0,
                model: str = "", diagnostics: Sequence[str] = ()) -> "GenerationResult":
        return cls(
            success=False,
            error_message=message,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            estimated_cost=calculate_cost(model, prompt_tokens, completion_tokens) if model else 0.0,
            model=model,
            diagnostics=list(diagnostics),
        )

    @classmethod
    def from_items(cls, items: Sequence[RecoveredItem], prompt_tokens: int,
                   completion_tokens: int, model: str,
                   diagnostics: Sequence[str] = ()) -> "GenerationResult":
        return cls(
            success=True,
            items=list(items),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            estimated_cost=calculate_cost(model, prompt_tokens, completion_tokens),
            model=model,
            diagnostics=list(diagnostics),
        )

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class Blueprint(BaseModel):
    """Reusable generation profile: target type, instructions and overrides."""
    name: str = "Unnamed Blueprint"
    target: str = Field(..., description="Import path of the target model, 'package.module:ClassName'")
    instructions: str = ""
    duplicate_strategy: Optional[DuplicateStrategy] = None
    discovery_scope: Optional[str] = None

    @field_validator("discovery_scope")
    @classmethod
    def _blank_scope_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def resolve_target(self) -> Type[BaseModel]:
        from ..core.schema import import_target
        return import_target(self.target)

    @classmethod
    def load(cls, path: Path) -> "Blueprint":
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate(json.load(f))

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))
