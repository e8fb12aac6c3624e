"""Generation client wrapper using LiteLLM.

Provides one ``generate(prompt, options)`` call across providers. Failures
propagate as raised by LiteLLM; classifying them into retryable and fatal
errors is the job of ResilientApiClient.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import litellm

from onboarder.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call generation options.

    Attributes:
        cached_content: Cache handle holding the repository context
        max_tokens: Override max_tokens from config
        system_prompt: Optional system prompt
        timeout: Seconds before the request is abandoned
    """

    cached_content: str | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None
    timeout: float | None = None


@dataclass
class LLMResponse:
    """Response from a generation call.

    Attributes:
        content: Generated text content
        model: Model that generated the response
        usage: Token usage statistics
        finish_reason: Reason for completion (stop, length, etc.)
    """

    content: str
    model: str
    usage: dict[str, int]
    finish_reason: str | None = None


class Generator(Protocol):
    """Anything that turns a prompt into an LLMResponse."""

    def generate(self, prompt: str, options: GenerationOptions | None = None) -> LLMResponse: ...


class LLMClient:
    """LiteLLM-backed generation client.

    Temperature is fixed at 0 so regenerated documents stay comparable.
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize client with configuration.

        Args:
            config: LLM configuration with provider, model, and credentials
        """
        self.config = config

    def generate(self, prompt: str, options: GenerationOptions | None = None) -> LLMResponse:
        """Generate a completion.

        Args:
            prompt: User prompt
            options: Cache handle, token limit, system prompt, timeout

        Returns:
            LLMResponse with generated content
        """
        options = options or GenerationOptions()
        messages: list[dict[str, str]] = []

        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        completion_kwargs: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": 0,
            "max_tokens": options.max_tokens or self.config.max_tokens,
        }
        if self.config.api_key:
            completion_kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            completion_kwargs["api_base"] = self.config.api_base
        if options.timeout is not None:
            completion_kwargs["timeout"] = options.timeout
        if options.cached_content:
            completion_kwargs["cached_content"] = options.cached_content

        response = litellm.completion(**completion_kwargs)

        choice = response.choices[0]
        content = choice.message.content or ""

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        logger.debug(
            "Generation finished (%s): %d chars, %s tokens",
            choice.finish_reason,
            len(content),
            usage.get("total_tokens", "?"),
        )

        return LLMResponse(
            content=content,
            model=response.model or self.config.model,
            usage=usage,
            finish_reason=choice.finish_reason,
        )


def create_client(config: LLMConfig) -> LLMClient:
    """Create a generation client from configuration.

    Raises:
        ValueError: If generation is disabled in config
    """
    if not config.enabled:
        raise ValueError("LLM is disabled in configuration")

    for warning in config.validate():
        logger.warning("LLM config: %s", warning)

    return LLMClient(config)
