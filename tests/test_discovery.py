"""Tests for existing-item discovery."""

import json

from itemforge.core.discovery import TYPE_KEY, discover_existing_items, tag_item


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def test_missing_scope_yields_nothing(tmp_path):
    assert discover_existing_items(tmp_path / "nowhere", "Armor") == []


def test_discovers_objects_and_arrays(tmp_path):
    write_json(tmp_path / "helm.json", {"item_type": "Armor", "name": "Iron Helm"})
    write_json(tmp_path / "batch.json", [
        {"item_type": "Armor", "name": "Steel Visor"},
        {"item_type": "Armor", "name": "Leather Cap"},
        "not an item",
    ])
    write_json(tmp_path / "nested" / "copy.json", {"item_type": "Armor", "name": "Iron Helm"})
    (tmp_path / "notes.txt").write_text('{"item_type": "Armor", "name": "Not Json File"}', encoding="utf-8")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")

    items = discover_existing_items(tmp_path, "Armor")
    assert sorted(item["name"] for item in items) == ["Iron Helm", "Leather Cap", "Steel Visor"]
    assert all(TYPE_KEY not in item for item in items)


def test_filters_by_item_type(tmp_path):
    write_json(tmp_path / "a.json", {"name": "Plate", "item_type": "Armor"})
    write_json(tmp_path / "b.json", {"name": "Elixir", "item_type": "Consumable"})

    assert discover_existing_items(tmp_path, "Armor") == [{"name": "Plate"}]
    assert len(discover_existing_items(tmp_path)) == 2


def test_types_sharing_a_scope_stay_apart(tmp_path):
    write_json(tmp_path / "weapons.json", [tag_item({"name": "Blade"}, "MeleeWeapon")])
    write_json(tmp_path / "armor.json", [tag_item({"name": "Helm", "defense": 5}, "Armor")])
    write_json(tmp_path / "loose.json", [{"name": "Mystery", "defense": 1}])

    assert discover_existing_items(tmp_path, "MeleeWeapon") == [{"name": "Blade"}]
    assert discover_existing_items(tmp_path, "Armor") == [{"name": "Helm", "defense": 5}]


def test_tag_item_puts_type_first():
    tagged = tag_item({"name": "Blade", "item_type": "Stale"}, "MeleeWeapon")
    assert list(tagged) == ["item_type", "name"]
    assert tagged["item_type"] == "MeleeWeapon"
