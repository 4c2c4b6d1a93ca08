"""Prompt templates and composition for item generation."""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from ..models.generation import DuplicateStrategy, FieldOverride, RecoveredItem, dump_item
from ..models.schema import TypeSchema
from .recovery import NAME_CANDIDATES
from .schema import generate_json_template, generate_schema_description

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = '''You are an item generation API. Your job is to generate structured items based on provided schemas and context.

CRITICAL RULES:
1. ALWAYS respond with valid JSON that matches the exact structure requested.
2. For single items, respond with a JSON object.
3. For multiple items, respond with a JSON array.
4. DO NOT include any text before or after the JSON.
5. DO NOT use markdown code blocks.
6. Ensure all field names match exactly as specified.
7. Generate creative, balanced, and coherent content.
8. Respect all value ranges and enum constraints provided.'''

SECTION = "=== {title} ==="

REMINDER_LINES = [
    "- For enum fields, use ONLY the allowed values specified in the schema.",
    "- Respect all range constraints for numeric fields.",
    "- Use the field descriptions as guidance for appropriate values.",
]

NO_DUPLICATES_LINES = [
    "- DO NOT duplicate any items from the existing items listed above.",
    "- Generate completely NEW and UNIQUE items that are different from existing ones.",
]


def build_system_prompt() -> str:
    """Fixed instruction text establishing the response contract."""
    return SYSTEM_PROMPT


def item_to_dict(item: Any) -> Optional[Dict[str, Any]]:
    """Best-effort conversion of an existing item to a JSON object."""
    if isinstance(item, RecoveredItem):
        return item.to_dict()
    if isinstance(item, BaseModel):
        return dump_item(item)
    if isinstance(item, dict):
        return item
    if isinstance(item, str):
        try:
            data = json.loads(item)
        except json.JSONDecodeError:
            return None
        return data if isinstance(data, dict) else None
    return None


def existing_item_name(item: Any) -> Optional[str]:
    """Display name of an existing item via the candidate key chain."""
    if isinstance(item, RecoveredItem):
        return item.name
    data = item_to_dict(item)
    if not data:
        return None
    for key in NAME_CANDIDATES:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def render_existing_items(existing_items: Sequence[Any], strategy: DuplicateStrategy) -> str:
    """Render the existing-items section for a strategy ('' when none applies)."""
    if strategy == DuplicateStrategy.IGNORE or not existing_items:
        return ""

    lines: List[str] = []
    if strategy == DuplicateStrategy.NAMES_ONLY:
        names = [n for n in (existing_item_name(item) for item in existing_items) if n]
        if not names:
            return ""
        lines.append(SECTION.format(title="EXISTING ITEM NAMES (AVOID THESE)"))
        lines.extend(f"- {name}" for name in names)
        lines.append("")
        lines.append("IMPORTANT: Avoid creating items with names matching those listed above.")
    else:
        blocks = [d for d in (item_to_dict(item) for item in existing_items) if d is not None]
        if not blocks:
            return ""
        lines.append(SECTION.format(title="EXISTING ITEMS (AVOID DUPLICATING)"))
        # Values JSON cannot represent (datetime, Decimal, set) are written as text
        lines.extend(json.dumps(block, indent=2, ensure_ascii=False, default=str) for block in blocks)
        lines.append("")
        lines.append("IMPORTANT: Do NOT create items that match the above items in structure or values.")
    return "\n".join(lines)


def render_field_overrides(overrides: Sequence[FieldOverride]) -> str:
    if not overrides:
        return ""
    lines = [SECTION.format(title="FIELD CONSTRAINTS")]
    for ov in overrides:
        line = f"- {ov.field_name}:"
        if ov.instruction:
            line += f" {ov.instruction}"
        if ov.min_value is not None or ov.max_value is not None:
            low = "any" if ov.min_value is None else ov.min_value
            high = "any" if ov.max_value is None else ov.max_value
            line += f" [range: {low} to {high}]"
        if ov.allowed_values:
            line += f" [allowed: {', '.join(ov.allowed_values)}]"
        lines.append(line)
    return "\n".join(lines)


def build_user_prompt(
    schema: TypeSchema,
    count: int,
    additional_context: str = "",
    existing_items: Sequence[Any] = (),
    strategy: DuplicateStrategy = DuplicateStrategy.IGNORE,
    field_overrides: Sequence[FieldOverride] = (),
    project_context: str = "",
) -> str:
    """Compose the user prompt for one generation request."""
    sections: List[str] = [
        SECTION.format(title="ITEM SCHEMA") + "\n" + generate_schema_description(schema),
        SECTION.format(title="JSON TEMPLATE") + "\n" + generate_json_template(schema),
    ]

    existing_section = render_existing_items(existing_items, strategy)
    if existing_section:
        sections.append(existing_section)

    overrides_section = render_field_overrides(field_overrides)
    if overrides_section:
        sections.append(overrides_section)

    context_parts = [part.strip() for part in (project_context, additional_context) if part and part.strip()]
    if context_parts:
        sections.append(SECTION.format(title="GENERATION CONTEXT") + "\n" + "\n\n".join(context_parts))

    request_lines = [SECTION.format(title="REQUEST")]
    if count == 1:
        request_lines.append(f"Generate exactly 1 unique {schema.type_name}.")
        request_lines.append("Respond with a single JSON object (not an array).")
    else:
        request_lines.append(f"Generate exactly {count} unique {schema.type_name} items.")
        request_lines.append("Respond with a JSON array containing all items.")
    sections.append("\n".join(request_lines))

    reminder = ["IMPORTANT:"] + REMINDER_LINES
    if existing_section:
        reminder += NO_DUPLICATES_LINES
    sections.append("\n".join(reminder))

    prompt = "\n\n".join(sections) + "\n"
    logger.debug(f"Built prompt for {count} {schema.type_name} item(s), strategy={strategy.value}, "
                 f"{len(prompt)} chars")
    return prompt
