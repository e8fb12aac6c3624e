"""LLM configuration entity.

Defines the generation backend used by the document pipeline. Supports
Gemini (the only provider with server-side context caching), Claude, Ollama
and Bedrock through LiteLLM.
"""

from dataclasses import dataclass, field

VALID_PROVIDERS = frozenset({"gemini", "claude", "ollama", "bedrock"})

# Providers whose API exposes cached-content handles
CACHING_PROVIDERS = frozenset({"gemini"})


@dataclass
class LLMConfig:
    """Configuration for the generation backend.

    Attributes:
        provider: LLM provider (gemini, claude, ollama, bedrock)
        model: Model identifier (e.g., "gemini-2.5-flash")
        api_key: API key (not required for Ollama or Bedrock)
        api_base: API base URL (required for Ollama)
        temperature: Sampling temperature (must be 0 for reproducible documents)
        max_tokens: Maximum response tokens per document
        enabled: Whether generation is enabled
    """

    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = field(default=0.0)
    max_tokens: int = field(default=16384)
    enabled: bool = field(default=True)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.provider = self.provider.lower().strip()

        if self.provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        if self.temperature != 0.0:
            raise ValueError(
                f"Temperature must be 0 for reproducible documents. Got: {self.temperature}"
            )

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.provider == "ollama" and not self.api_base:
            self.api_base = "http://localhost:11434"

    @property
    def supports_context_cache(self) -> bool:
        """Return True if the provider can reference cached content."""
        return self.provider in CACHING_PROVIDERS

    def validate(self) -> list[str]:
        """Validate configuration and return warnings.

        Returns:
            List of warning messages (empty if no warnings)
        """
        warnings: list[str] = []

        if self.enabled and self.provider in {"gemini", "claude"} and not self.api_key:
            warnings.append(f"api_key is not set for {self.provider}; generation calls will fail")

        if self.max_tokens < 4096:
            warnings.append(
                f"max_tokens is set to {self.max_tokens}, which may truncate documents"
            )

        return warnings

    def to_dict(self) -> dict[str, str | int | float | bool | None]:
        """Convert to dictionary for serialization (API key masked)."""
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": "***" if self.api_key else None,
            "api_base": self.api_base,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str | int | float | bool | None]) -> "LLMConfig":
        """Create LLMConfig from dictionary."""
        defaults = cls()
        return cls(
            provider=str(data.get("provider") or defaults.provider),
            model=str(data.get("model") or defaults.model),
            api_key=data.get("api_key") or None,  # type: ignore[arg-type]
            api_base=data.get("api_base") or None,  # type: ignore[arg-type]
            temperature=float(data.get("temperature", 0.0)),  # type: ignore[arg-type]
            max_tokens=int(data.get("max_tokens", defaults.max_tokens)),  # type: ignore[arg-type]
            enabled=bool(data.get("enabled", True)),
        )

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM ``provider/model`` format."""
        if self.provider == "ollama":
            return f"ollama/{self.model}"
        elif self.provider == "bedrock":
            return f"bedrock/{self.model}"
        elif self.provider == "gemini":
            return f"gemini/{self.model}"
        else:
            return f"anthropic/{self.model}"
