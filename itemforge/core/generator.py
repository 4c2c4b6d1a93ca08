"""Generation service: schema -> prompt -> chat -> recovery -> result.

Behavioral guarantees:
- Every call returns exactly one GenerationResult; pipeline errors never
  escape the public entry points.
- Strategy and discovery scope are resolved once per request.
- Nothing is written to shared state; the caller owns the result.
"""

import logging
from typing import Any, List, Optional, Sequence

from ..models.config import Settings
from ..models.generation import Blueprint, DuplicateStrategy, GenerationRequest, GenerationResult
from .discovery import discover_existing_items
from .errors import EmptyResponseError, InputValidationError, ItemForgeError, ParseError
from .llm_client import ChatClient, ChatResponse
from .prompts import build_system_prompt, build_user_prompt
from .recovery import ResponseRecoveryEngine
from .schema import extract_schema
from .strategy import ResolvedStrategy, resolve_strategy

logger = logging.getLogger(__name__)


class ItemGenerator:
    """Generates typed items from any pydantic model definition."""

    def __init__(self, settings: Settings, client: Optional[ChatClient] = None):
        self.settings = settings
        self.llm_config = settings.llm_config
        self.defaults = settings.generator_config
        self.client = client or ChatClient(self.llm_config)

    async def generate(self, request: Optional[GenerationRequest]) -> GenerationResult:
        """Run one generation request end to end."""
        model = self.llm_config.model
        response: Optional[ChatResponse] = None
        try:
            self._validate(request)
            schema = extract_schema(request.target)
            resolved = resolve_strategy(request.duplicate_strategy, request.discovery_scope, self.defaults)
            existing = self._existing_items(request, resolved, schema.type_name)

            system_prompt = build_system_prompt()
            user_prompt = build_user_prompt(
                schema,
                request.count,
                additional_context=request.additional_context,
                existing_items=existing,
                strategy=resolved.duplicate_strategy,
                field_overrides=request.field_overrides,
                project_context=self.defaults.project_context(),
            )

            logger.info(f"Generating {request.count} {schema.type_name} item(s) with {model} "
                        f"(strategy={resolved.duplicate_strategy.value}, existing={len(existing)})")

            response = await self.client.complete(
                system_prompt, user_prompt, model=model, temperature=self.llm_config.temperature)

            if response.choice_count == 0:
                raise EmptyResponseError("Empty choices in response.")
            if not response.content or not response.content.strip():
                raise EmptyResponseError("Empty content in response.")

            engine = ResponseRecoveryEngine(request.target, schema)
            outcome = engine.recover(response.content, request.count)

        except ParseError as e:
            logger.error(f"Failed to parse items: {e}")
            return self._failure(f"JSON parsing failed: {e}", response, model, e.diagnostics)
        except ItemForgeError as e:
            logger.error(f"Generation failed: {e}")
            return self._failure(str(e), response, model)
        except Exception as e:
            logger.exception(f"Unexpected error during generation: {e}")
            return self._failure(f"Unexpected error: {e}", response, model)

        if len(outcome.items) < request.count:
            logger.warning(f"Partial generation: requested {request.count}, got {len(outcome.items)}")

        result = GenerationResult.from_items(
            outcome.items,
            prompt_tokens=response.prompt_tokens,
            completion_tokens=response.completion_tokens,
            model=model,
            diagnostics=outcome.diagnostics,
        )
        logger.info(f"Generated {len(result.items)} item(s). Tokens: {result.total_tokens} "
                    f"({result.prompt_tokens} prompt, {result.completion_tokens} completion).")
        return result

    async def generate_from_blueprint(
        self,
        blueprint: Optional[Blueprint],
        count: int,
        existing_items: Optional[Sequence[Any]] = None,
    ) -> GenerationResult:
        """Generate using a blueprint's target, instructions and overrides."""
        if blueprint is None:
            return GenerationResult.failure("Blueprint cannot be null.")
        try:
            target = blueprint.resolve_target()
        except InputValidationError as e:
            return GenerationResult.failure(f"Blueprint target is invalid: {e}")
        except Exception as e:
            logger.exception(f"Failed to import blueprint target '{blueprint.target}'")
            return GenerationResult.failure(f"Blueprint target is invalid: {e}")

        logger.debug(f"Generating from blueprint '{blueprint.name}'")
        request = GenerationRequest(
            target=target,
            count=count,
            additional_context=blueprint.instructions,
            existing_items=list(existing_items or []),
            duplicate_strategy=blueprint.duplicate_strategy,
            discovery_scope=blueprint.discovery_scope,
        )
        return await self.generate(request)

    def _validate(self, request: Optional[GenerationRequest]) -> None:
        if request is None:
            raise InputValidationError("Generation request cannot be null.")
        if request.target is None:
            raise InputValidationError("Target type cannot be null.")
        if request.count < 1:
            raise InputValidationError(f"Item count must be at least 1, got {request.count}.")
        if request.count > self.defaults.max_batch_size:
            raise InputValidationError(
                f"Item count {request.count} exceeds the maximum batch size of {self.defaults.max_batch_size}.")

    def _existing_items(self, request: GenerationRequest, resolved: ResolvedStrategy,
                        type_name: str) -> List[Any]:
        # Snapshot so later caller mutation cannot affect this request
        if request.existing_items:
            return list(request.existing_items)
        if self.defaults.auto_discover_existing and resolved.duplicate_strategy != DuplicateStrategy.IGNORE:
            return discover_existing_items(resolved.discovery_scope, type_name)
        return []

    @staticmethod
    def _failure(message: str, response: Optional[ChatResponse], model: str,
                 diagnostics: Sequence[str] = ()) -> GenerationResult:
        if response is None:
            return GenerationResult.failure(message, diagnostics=diagnostics)
        return GenerationResult.failure(
            message,
            prompt_tokens=response.prompt_tokens,
            completion_tokens=response.completion_tokens,
            model=model,
            diagnostics=diagnostics,
        )
