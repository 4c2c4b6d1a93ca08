"""Chat client for the text-generation service (OpenAI or Azure OpenAI)."""

import logging
from typing import Any, Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI
from pydantic import BaseModel

from ..models.config import LLMConfig
from .errors import TransportError

logger = logging.getLogger(__name__)

# Models that reject any temperature other than the default
FIXED_TEMPERATURE_PREFIXES = ("o1", "o3", "gpt-5")


class ChatResponse(BaseModel):
    """The parts of a chat completion the generator consumes."""
    content: Optional[str] = None
    choice_count: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    model: str = ""


def supports_temperature(model: str) -> bool:
    return not (model or "").lower().startswith(FIXED_TEMPERATURE_PREFIXES)


class ChatClient:
    def __init__(self, llm_config: LLMConfig, client: Optional[Any] = None):
        self.llm_config = llm_config
        if client is not None:
            self.client = client
        elif llm_config.uses_azure:
            self.client = AsyncAzureOpenAI(
                api_key=llm_config.openai_api_key,
                azure_endpoint=llm_config.azure_openai_endpoint,
                api_version=llm_config.azure_openai_api_version,
                timeout=llm_config.timeout,
            )
        else:
            self.client = AsyncOpenAI(
                api_key=llm_config.openai_api_key,
                base_url=llm_config.openai_base_url,
                timeout=llm_config.timeout,
            )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> ChatResponse:
        """Send one {system, user} exchange and return the first choice."""
        model = model or self.llm_config.model
        temperature = self.llm_config.temperature if temperature is None else temperature

        request = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if supports_temperature(model):
            request["temperature"] = min(max(temperature, 0.0), 2.0)

        logger.debug(f"Sending chat request to {model}")
        try:
            response = await self.client.chat.completions.create(**request)
        except Exception as e:
            logger.error(f"Chat request failed: {e}")
            raise TransportError(f"Request to {model} failed: {e}") from e

        if response is None:
            raise TransportError(f"No response from {model}.")

        choices = getattr(response, "choices", None) or []
        content = None
        if choices:
            message = getattr(choices[0], "message", None)
            content = getattr(message, "content", None)

        usage = getattr(response, "usage", None)
        return ChatResponse(
            content=content if isinstance(content, str) else None,
            choice_count=len(choices),
            prompt_tokens=_token_count(usage, "prompt_tokens"),
            completion_tokens=_token_count(usage, "completion_tokens"),
            model=model,
        )


def _token_count(usage: Any, attr: str) -> int:
    value = getattr(usage, attr, 0) if usage is not None else 0
    return value if isinstance(value, int) else 0
