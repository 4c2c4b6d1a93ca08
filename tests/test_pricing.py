"""Tests for cost estimation and result aggregation."""

import pytest
from pydantic import BaseModel, ValidationError

from itemforge.core.pricing import DEFAULT_MODEL, PRICING, calculate_cost, get_pricing
from itemforge.models.generation import GenerationResult, RecoveredItem


class Gem(BaseModel):
    name: str = ""


def test_cost_calculation():
    assert calculate_cost("gpt-4o", 1000, 500) == pytest.approx(0.0075)


def test_known_model_pricing():
    assert get_pricing("gpt-4o-mini") == (0.15, 0.60)
    assert get_pricing("o1") == (15.00, 60.00)


def test_dated_snapshot_uses_longest_prefix():
    assert get_pricing("gpt-4o-mini-2024-07-18") == PRICING["gpt-4o-mini"]
    assert get_pricing("gpt-4o-2024-08-06") == PRICING["gpt-4o"]


def test_unknown_model_falls_back_to_default():
    assert get_pricing("some-local-model") == PRICING[DEFAULT_MODEL]
    assert get_pricing("") == PRICING[DEFAULT_MODEL]


def test_result_from_items():
    items = [RecoveredItem(name="Ruby", instance=Gem(name="Ruby"))]
    result = GenerationResult.from_items(items, prompt_tokens=1000, completion_tokens=500, model="gpt-4o")

    assert result.success
    assert result.error_message == ""
    assert result.estimated_cost == pytest.approx(0.0075)
    assert result.total_tokens == 1500
    assert result.items[0].to_dict() == {"name": "Ruby"}


def test_failure_result():
    result = GenerationResult.failure("Empty choices in response.")
    assert not result.success
    assert result.items == []
    assert result.estimated_cost == 0.0

    billed = GenerationResult.failure("bad json", prompt_tokens=1000, completion_tokens=500, model="gpt-4o")
    assert billed.estimated_cost == pytest.approx(0.0075)


def test_result_is_immutable():
    result = GenerationResult.failure("nope")
    with pytest.raises(ValidationError):
        result.success = True
