"""Discovery of previously generated items to feed duplicate avoidance."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

TYPE_KEY = "item_type"


def tag_item(data: Dict[str, Any], type_name: str) -> Dict[str, Any]:
    """Return ``data`` with the ``item_type`` tag that discovery filters on."""
    return {TYPE_KEY: type_name, **{k: v for k, v in data.items() if k != TYPE_KEY}}


def discover_existing_items(scope: Union[str, Path], type_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """Load item objects from every ``*.json`` file under ``scope``.

    A file may hold one object or an array of objects. When ``type_name`` is
    given, only objects tagged with a matching ``item_type`` are kept;
    untagged objects cannot be attributed to a type and are skipped. The tag
    is removed from the returned objects. Identical objects are returned once.
    """
    root = Path(scope)
    if not root.is_dir():
        logger.debug(f"Search path does not exist: {root}")
        return []

    items: List[Dict[str, Any]] = []
    seen = set()
    untagged = 0
    for path in sorted(root.rglob("*.json")):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Skipping unreadable item file {path}: {e}")
            continue

        candidates = data if isinstance(data, list) else [data]
        for candidate in candidates:
            if not isinstance(candidate, dict):
                continue
            if type_name:
                tag = candidate.get(TYPE_KEY)
                if tag is None:
                    untagged += 1
                    continue
                if tag != type_name:
                    continue
            item = {k: v for k, v in candidate.items() if k != TYPE_KEY}
            key = json.dumps(item, sort_keys=True)
            if key in seen:
                continue
            seen.add(key)
            items.append(item)

    if untagged:
        logger.debug(f"Skipped {untagged} object(s) without an '{TYPE_KEY}' tag in {root}")
    logger.info(f"Discovered {len(items)} existing {type_name or 'item'}(s) in {root}")
    return items
