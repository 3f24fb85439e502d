"""
Module: config

Purpose:
    Configuration dataclass for the question generator. Immutable
    configuration with validation on construction, optionally populated
    from environment variables (a .env file is loaded by the CLI).

Key Classes:
    - GeneratorConfig: Model, sampling and connection settings

Dependencies:
    - dataclasses (std)
    - os (std)

Used By:
    - generation.client: OpenAIQuestionGenerator
    - cli: Command-line entry point
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from exam_toolkit.errors import ConfigError


DEFAULT_MODEL = "gpt-4o-mini"

ENV_MODEL = "EXAM_TOOLKIT_MODEL"
ENV_API_KEY = "OPENAI_API_KEY"
ENV_TEMPERATURE = "EXAM_TOOLKIT_TEMPERATURE"
ENV_TIMEOUT = "EXAM_TOOLKIT_TIMEOUT"
ENV_BASE_URL = "OPENAI_BASE_URL"


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Configuration for the LLM question generator (immutable).

    Attributes:
        model: Chat model name
        api_key: API key; None means the client cannot be created
        temperature: Sampling temperature for bulk generation (0-2)
        regeneration_temperature: Sampling temperature for single-question
            regeneration, higher so the replacement differs
        max_tokens: Upper bound on completion tokens
        timeout_s: Per-request timeout passed to the client
        base_url: Optional alternative API endpoint

    Example:
        >>> config = GeneratorConfig(api_key="sk-test", temperature=0.5)
        >>> config.model
        'gpt-4o-mini'
    """

    model: str = DEFAULT_MODEL
    api_key: Optional[str] = None
    temperature: float = 0.7
    regeneration_temperature: float = 0.9
    max_tokens: int = 4096
    timeout_s: float = 60.0
    base_url: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not self.model:
            raise ValueError("model must not be empty")
        for name in ("temperature", "regeneration_temperature"):
            value = getattr(self, name)
            if not 0.0 <= value <= 2.0:
                raise ValueError(f"{name} must be between 0 and 2: {value}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive: {self.max_tokens}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive: {self.timeout_s}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> GeneratorConfig:
        """
        Build a config from environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            GeneratorConfig

        Raises:
            ConfigError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get(ENV_MODEL):
            kwargs["model"] = env[ENV_MODEL]
        if env.get(ENV_API_KEY):
            kwargs["api_key"] = env[ENV_API_KEY]
        if env.get(ENV_BASE_URL):
            kwargs["base_url"] = env[ENV_BASE_URL]
        try:
            if env.get(ENV_TEMPERATURE):
                kwargs["temperature"] = float(env[ENV_TEMPERATURE])
            if env.get(ENV_TIMEOUT):
                kwargs["timeout_s"] = float(env[ENV_TIMEOUT])
            return cls(**kwargs)
        except ValueError as e:
            raise ConfigError(f"Invalid generator configuration: {e}") from e

    def require_api_key(self) -> str:
        """Return the API key or raise ConfigError when it is missing."""
        if not self.api_key:
            raise ConfigError(f"No API key configured; set {ENV_API_KEY}")
        return self.api_key
