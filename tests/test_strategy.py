"""Tests for duplicate-strategy and discovery-scope resolution."""

import pytest

from itemforge.core.strategy import resolve_strategy
from itemforge.models.config import GeneratorConfig
from itemforge.models.generation import DuplicateStrategy


@pytest.fixture
def defaults():
    return GeneratorConfig(duplicate_strategy=DuplicateStrategy.NAMES_ONLY, discovery_scope="items")


def test_defaults_apply_without_overrides(defaults):
    resolved = resolve_strategy(None, None, defaults)
    assert resolved.duplicate_strategy == DuplicateStrategy.NAMES_ONLY
    assert resolved.discovery_scope == "items"


def test_overrides_win(defaults):
    resolved = resolve_strategy(DuplicateStrategy.FULL_COMPOSITION, "items/armor", defaults)
    assert resolved.duplicate_strategy == DuplicateStrategy.FULL_COMPOSITION
    assert resolved.discovery_scope == "items/armor"


def test_ignore_override_is_honored(defaults):
    assert resolve_strategy(DuplicateStrategy.IGNORE, None, defaults).duplicate_strategy == DuplicateStrategy.IGNORE


def test_empty_scope_falls_back(defaults):
    assert resolve_strategy(None, "", defaults).discovery_scope == "items"


def test_string_override_is_coerced(defaults):
    assert resolve_strategy("full_composition", None, defaults).duplicate_strategy == DuplicateStrategy.FULL_COMPOSITION
