"""Configuration models."""

from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .generation import DuplicateStrategy


class LLMConfig(BaseModel):
    """Text-generation service configuration."""
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None

    # Azure OpenAI is used when an endpoint is configured
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_version: str = "2024-12-01-preview"

    model: str = "gpt-4o"
    temperature: float = 0.8
    timeout: float = 120.0

    @property
    def uses_azure(self) -> bool:
        return bool(self.azure_openai_endpoint)


class GeneratorConfig(BaseModel):
    """Defaults consumed by the generation service."""
    duplicate_strategy: DuplicateStrategy = DuplicateStrategy.IGNORE
    discovery_scope: str = "items"
    auto_discover_existing: bool = True
    default_batch_size: int = 5
    max_batch_size: int = 20

    # Project context prepended to every request's generation context
    project_name: str = ""
    project_description: str = ""
    target_audience: str = ""
    additional_rules: str = ""

    def project_context(self) -> str:
        lines = []
        if self.project_name:
            lines.append(f"Project: {self.project_name}")
        if self.project_description:
            lines.append(f"Description: {self.project_description}")
        if self.target_audience:
            lines.append(f"Audience: {self.target_audience}")
        if self.additional_rules:
            lines.append(f"Additional Rules: {self.additional_rules}")
        return "\n".join(lines)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI / Azure OpenAI
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_version: str = "2024-12-01-preview"

    # Model selection
    model: str = "gpt-4o"
    temperature: float = 0.8
    request_timeout: float = 120.0

    # Generation defaults
    duplicate_strategy: DuplicateStrategy = DuplicateStrategy.IGNORE
    discovery_scope: str = "items"
    auto_discover_existing: bool = True
    default_batch_size: int = 5
    max_batch_size: int = 20

    # Project context
    project_name: str = ""
    project_description: str = ""
    target_audience: str = ""
    additional_rules: str = ""

    # Application configuration
    log_level: str = "INFO"

    @property
    def llm_config(self) -> LLMConfig:
        """Get LLM configuration."""
        return LLMConfig(
            openai_api_key=self.openai_api_key,
            openai_base_url=self.openai_base_url,
            azure_openai_endpoint=self.azure_openai_endpoint,
            azure_openai_api_version=self.azure_openai_api_version,
            model=self.model,
            temperature=self.temperature,
            timeout=self.request_timeout,
        )

    @property
    def generator_config(self) -> GeneratorConfig:
        """Get generation defaults."""
        return GeneratorConfig(
            duplicate_strategy=self.duplicate_strategy,
            discovery_scope=self.discovery_scope,
            auto_discover_existing=self.auto_discover_existing,
            default_batch_size=self.default_batch_size,
            max_batch_size=self.max_batch_size,
            project_name=self.project_name,
            project_description=self.project_description,
            target_audience=self.target_audience,
            additional_rules=self.additional_rules,
        )
