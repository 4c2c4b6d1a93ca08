"""Tests for the generation service."""

import json
from datetime import datetime
from decimal import Decimal

import pytest
from unittest.mock import AsyncMock, MagicMock

from itemforge.core.errors import TransportError
from itemforge.core.generator import ItemGenerator
from itemforge.core.llm_client import ChatResponse
from itemforge.models.config import Settings
from itemforge.models.generation import Blueprint, DuplicateStrategy, GenerationRequest
from itemforge.samples.items import Consumable, ConsumableEffect, MeleeWeapon, MeleeWeaponType

WEAPONS = [
    {"name": "Rusty Blade", "damage": 12, "weapon_type": "SWORD", "rarity": "COMMON"},
    {"name": "Skull Crusher", "damage": 250, "weapon_type": "MACE", "rarity": "RARE"},
    {"name": "Whisper", "damage": 30, "weapon_type": "DAGGER", "rarity": "EPIC"},
]


def chat_response(content, prompt_tokens=1000, completion_tokens=500, choice_count=1):
    return ChatResponse(
        content=content,
        choice_count=choice_count,
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        model="gpt-4o",
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        model="gpt-4o",
        duplicate_strategy=DuplicateStrategy.IGNORE,
        discovery_scope=str(tmp_path / "items"),
        max_batch_size=10,
    )


@pytest.fixture
def chat_client():
    client = MagicMock()
    client.complete = AsyncMock(return_value=chat_response(json.dumps(WEAPONS)))
    return client


@pytest.fixture
def generator(settings, chat_client):
    return ItemGenerator(settings, client=chat_client)


def sent_user_prompt(chat_client):
    return chat_client.complete.call_args.args[1]


@pytest.mark.asyncio
async def test_partial_batch_is_success(generator):
    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 3))

    assert result.success
    assert [item.name for item in result.items] == ["Rusty_Blade", "Whisper"]
    assert result.items[1].instance.weapon_type == MeleeWeaponType.DAGGER
    assert len(result.diagnostics) == 1
    assert result.prompt_tokens == 1000
    assert result.completion_tokens == 500
    assert result.estimated_cost == pytest.approx(0.0075)
    assert result.model == "gpt-4o"


@pytest.mark.asyncio
async def test_single_item(generator, chat_client):
    chat_client.complete.return_value = chat_response(
        '```json\n{"name": "Minor Potion", "effect_type": "HEAL", "effect_power": 10}\n```')
    result = await generator.generate(GenerationRequest.single(Consumable, "Low level loot"))

    assert result.success
    assert result.items[0].name == "Minor_Potion"
    assert result.items[0].instance.effect_type == ConsumableEffect.HEAL
    assert "Low level loot" in sent_user_prompt(chat_client)


@pytest.mark.asyncio
async def test_empty_choices_is_failure(generator, chat_client):
    chat_client.complete.return_value = chat_response(None, choice_count=0)
    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 2))

    assert not result.success
    assert result.error_message == "Empty choices in response."
    assert result.items == []


@pytest.mark.asyncio
async def test_empty_content_is_failure(generator, chat_client):
    chat_client.complete.return_value = chat_response("   ")
    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 2))

    assert not result.success
    assert result.error_message == "Empty content in response."


@pytest.mark.asyncio
async def test_transport_error_is_failure(generator, chat_client):
    chat_client.complete.side_effect = TransportError("Request to gpt-4o failed: timeout")
    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 2))

    assert not result.success
    assert "timeout" in result.error_message
    assert result.items == []
    assert result.estimated_cost == 0.0


@pytest.mark.asyncio
async def test_unparseable_response_is_failure(generator, chat_client):
    chat_client.complete.return_value = chat_response("I cannot help with that.")
    result = await generator.generate(GenerationRequest.single(MeleeWeapon))

    assert not result.success
    assert result.error_message.startswith("JSON parsing failed")
    assert result.prompt_tokens == 1000


@pytest.mark.asyncio
async def test_empty_array_is_empty_success(generator, chat_client):
    chat_client.complete.return_value = chat_response("[]")
    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 3))

    assert result.success
    assert result.items == []


@pytest.mark.asyncio
async def test_invalid_requests(generator, chat_client):
    result = await generator.generate(None)
    assert not result.success
    assert result.error_message == "Generation request cannot be null."

    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 0))
    assert not result.success

    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 11))
    assert not result.success
    assert "maximum batch size" in result.error_message

    chat_client.complete.assert_not_called()


@pytest.mark.asyncio
async def test_request_strategy_overrides_default(generator, chat_client):
    request = GenerationRequest.batch(
        MeleeWeapon, 3,
        existing_items=[{"name": "Old Faithful"}],
        duplicate_strategy=DuplicateStrategy.NAMES_ONLY,
    )
    await generator.generate(request)
    assert "- Old Faithful" in sent_user_prompt(chat_client)


@pytest.mark.asyncio
async def test_default_ignore_skips_existing_items(generator, chat_client):
    await generator.generate(GenerationRequest.batch(MeleeWeapon, 3, existing_items=[{"name": "Old Faithful"}]))
    assert "Old Faithful" not in sent_user_prompt(chat_client)


@pytest.mark.asyncio
async def test_existing_items_discovered_from_scope(settings, chat_client, tmp_path):
    scope = tmp_path / "items"
    scope.mkdir()
    sword = {"item_type": "MeleeWeapon", "name": "Dawnbreaker", "damage": 40}
    (scope / "sword.json").write_text(json.dumps(sword), encoding="utf-8")
    (scope / "cap.json").write_text(json.dumps({"name": "Untagged Cap"}), encoding="utf-8")
    settings.duplicate_strategy = DuplicateStrategy.FULL_COMPOSITION
    generator = ItemGenerator(settings, client=chat_client)

    await generator.generate(GenerationRequest.batch(MeleeWeapon, 3))
    prompt = sent_user_prompt(chat_client)
    assert "EXISTING ITEMS (AVOID DUPLICATING)" in prompt
    assert '"name": "Dawnbreaker"' in prompt
    assert "Untagged Cap" not in prompt
    assert '"item_type"' not in prompt


@pytest.mark.asyncio
async def test_generate_from_blueprint(generator, chat_client):
    chat_client.complete.return_value = chat_response(
        '[{"name": "Elixir", "effect_type": "RESTORE_MANA"}, {"name": "Tonic", "effect_type": "CURE"}]')
    blueprint = Blueprint(
        name="Alchemy",
        target="itemforge.samples.items:Consumable",
        instructions="Brewed by swamp witches",
        duplicate_strategy=DuplicateStrategy.NAMES_ONLY,
    )
    result = await generator.generate_from_blueprint(blueprint, 2, existing_items=[{"name": "Bog Water"}])

    assert result.success
    assert [item.instance.effect_type for item in result.items] == [
        ConsumableEffect.RESTORE_MANA, ConsumableEffect.CURE]
    prompt = sent_user_prompt(chat_client)
    assert "Brewed by swamp witches" in prompt
    assert "- Bog Water" in prompt


@pytest.mark.asyncio
async def test_generate_from_invalid_blueprint(generator, chat_client):
    result = await generator.generate_from_blueprint(None, 1)
    assert result.error_message == "Blueprint cannot be null."

    result = await generator.generate_from_blueprint(Blueprint(target="itemforge.samples.items:Nope"), 1)
    assert not result.success
    assert result.error_message.startswith("Blueprint target is invalid")
    chat_client.complete.assert_not_called()


@pytest.mark.asyncio
async def test_existing_items_with_non_json_values(generator, chat_client):
    request = GenerationRequest.batch(
        MeleeWeapon, 3,
        existing_items=[{"name": "Old Blade", "forged": datetime(2024, 1, 1), "price": Decimal("9.50")}],
        duplicate_strategy=DuplicateStrategy.FULL_COMPOSITION,
    )
    result = await generator.generate(request)

    assert result.success
    prompt = sent_user_prompt(chat_client)
    assert '"forged": "2024-01-01 00:00:00"' in prompt
    assert '"price": "9.50"' in prompt


@pytest.mark.asyncio
async def test_unexpected_error_becomes_failure(generator, chat_client):
    chat_client.complete.side_effect = RuntimeError("client exploded")
    result = await generator.generate(GenerationRequest.batch(MeleeWeapon, 2))

    assert not result.success
    assert result.error_message == "Unexpected error: client exploded"
    assert result.items == []
