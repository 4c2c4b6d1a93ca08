"""Duplicate-strategy and discovery-scope resolution."""

import logging
from typing import NamedTuple, Optional

from ..models.config import GeneratorConfig
from ..models.generation import DuplicateStrategy

logger = logging.getLogger(__name__)


class ResolvedStrategy(NamedTuple):
    duplicate_strategy: DuplicateStrategy
    discovery_scope: str


def resolve_strategy(
    duplicate_override: Optional[DuplicateStrategy],
    scope_override: Optional[str],
    defaults: GeneratorConfig,
) -> ResolvedStrategy:
    """Apply the override if present, otherwise the process-wide default."""
    strategy = duplicate_override if duplicate_override is not None else defaults.duplicate_strategy
    scope = scope_override if scope_override else defaults.discovery_scope

    logger.debug(
        f"Resolved strategy: override={duplicate_override}, default={defaults.duplicate_strategy}, "
        f"effective={strategy}; scope={scope}"
    )
    return ResolvedStrategy(DuplicateStrategy(strategy), scope)

