"""Per-model token pricing and cost estimation."""

import logging
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"

# USD per 1M tokens: (input, output)
PRICING: Dict[str, Tuple[float, float]] = {
    "gpt-4o": (2.50, 10.00),
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4.1": (2.00, 8.00),
    "gpt-4.1-mini": (0.40, 1.60),
    "o1": (15.00, 60.00),
    "o1-preview": (15.00, 60.00),
}

TOKENS_PER_UNIT = 1_000_000


def get_pricing(model: str) -> Tuple[float, float]:
    """Return (input, output) USD per 1M tokens for a model name.

    Dated snapshots such as ``gpt-4o-2024-08-06`` resolve to the longest
    known prefix. Unknown models are priced as the default model.
    """
    name = (model or "").strip().lower()
    if name in PRICING:
        return PRICING[name]

    matches = [key for key in PRICING if name.startswith(key + "-")]
    if matches:
        return PRICING[max(matches, key=len)]

    logger.debug(f"No pricing for model '{model}', using {DEFAULT_MODEL} rates")
    return PRICING[DEFAULT_MODEL]


def calculate_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Estimate the USD cost of one request."""
    input_rate, output_rate = get_pricing(model)
    return (prompt_tokens * input_rate / TOKENS_PER_UNIT
            + completion_tokens * output_rate / TOKENS_PER_UNIT)
