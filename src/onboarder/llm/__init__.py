"""Generation layer.

Wraps LiteLLM behind a single ``generate(prompt, options)`` call and adds
error classification, capped exponential backoff and response cleanup.
"""

from onboarder.llm.client import (
    GenerationOptions,
    Generator,
    LLMClient,
    LLMResponse,
    create_client,
)
from onboarder.llm.extract import clean_response, extract_document
from onboarder.llm.resilient import ResilientApiClient, RetryPolicy, classify_error
from onboarder.models.llm_config import VALID_PROVIDERS, LLMConfig

__all__ = [
    "GenerationOptions",
    "Generator",
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "ResilientApiClient",
    "RetryPolicy",
    "VALID_PROVIDERS",
    "classify_error",
    "clean_response",
    "create_client",
    "extract_document",
]
