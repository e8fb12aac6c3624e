"""repo-onboarder configuration system.

Configuration is YAML-based with a handful of CLI overrides (--branch,
--language, --output, --no-cache, --debug). Supports environment variable
substitution (${VAR}) in config files, which is the expected way to supply
the git token and the LLM API key.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.onboarder/config.yaml
3. ./onboarder.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from onboarder.models.llm_config import LLMConfig

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class GitConfig:
    """Repository access settings.

    Attributes:
        workdir: Directory under which each run clones into a fresh subdirectory
        username: Username paired with the token (GitHub accepts x-access-token)
        token: Access token for private repositories
        remote: Remote name used for fetch/pull
    """

    workdir: str = ".onboarder/work"
    username: str = "x-access-token"
    token: str | None = None
    remote: str = "origin"


@dataclass
class AnalysisConfig:
    """Commit history analysis limits.

    Attributes:
        max_commits: Maximum commits to walk, newest first (0 = unlimited)
        max_changed_files: Maximum file changes kept per commit (0 = unlimited)
        include_patch: Whether to keep a unified-diff snippet per file change
        max_patch_chars: Patch snippet length cap (<= 0 disables truncation)
        max_report_files: Files listed in the git report markdown
    """

    max_commits: int = 200
    max_changed_files: int = 200
    include_patch: bool = False
    max_patch_chars: int = 4000
    max_report_files: int = 300

    def __post_init__(self) -> None:
        """Validate limits."""
        if self.max_commits < 0:
            raise ValueError(f"max_commits must be >= 0 (got {self.max_commits})")
        if self.max_changed_files < 0:
            raise ValueError(f"max_changed_files must be >= 0 (got {self.max_changed_files})")


@dataclass
class RetryConfig:
    """Retry policy for generation calls.

    Attributes:
        max_attempts: Total attempts including the first call
        initial_delay_ms: Delay before the second attempt
        multiplier: Backoff multiplier per attempt
        max_delay_ms: Upper bound for a single delay
        timeout_seconds: Overall run deadline (None = no deadline)
    """

    max_attempts: int = 3
    initial_delay_ms: int = 1000
    multiplier: float = 2.0
    max_delay_ms: int = 30000
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        """Validate retry policy."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1 (got {self.max_attempts})")
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("Retry delays must be non-negative")
        if self.multiplier < 1.0:
            raise ValueError(f"multiplier must be >= 1.0 (got {self.multiplier})")


@dataclass
class CacheConfig:
    """Repository context cache settings.

    Attributes:
        enabled: Whether to create/reuse cached context
        backend: Cache store (gemini, memory)
        ttl_seconds: Lifetime of a cache entry
        min_tokens: Store minimum; smaller payloads trigger a warning
    """

    enabled: bool = True
    backend: str = "gemini"
    ttl_seconds: int = 3600
    min_tokens: int = 32768

    def __post_init__(self) -> None:
        """Validate cache configuration."""
        valid_backends = {"gemini", "memory"}
        if self.backend not in valid_backends:
            raise ValueError(f"Invalid cache backend: {self.backend}. Valid: {valid_backends}")
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive (got {self.ttl_seconds})")


@dataclass
class OutputConfig:
    """Output configuration.

    Attributes:
        directory: Directory receiving one markdown file per document
        git_report: File name of the git report written next to the documents
        debug: Write prompt/response debug files for every stage
        debug_directory: Directory for debug files
        write_payloads: Write the context payload sections as text files
    """

    directory: str = "onboarding-docs"
    git_report: str = "GIT_REPORT.md"
    debug: bool = False
    debug_directory: str = ".onboarder/debug"
    write_payloads: bool = False


@dataclass
class DocumentsConfig:
    """Document pipeline settings.

    Attributes:
        target_language: Language every document is written in
        include_tests: Keep test files in the listing and source corpus
        judge: Run the validation stage after all documents are generated
    """

    target_language: str = "English"
    include_tests: bool = False
    judge: bool = False


@dataclass
class OnboarderConfig:
    """Top-level configuration.

    Attributes:
        git: Repository access
        analysis: Commit history limits
        llm: Generation backend
        retry: Generation retry policy
        cache: Context cache
        output: Output locations
        documents: Document pipeline settings
    """

    git: GitConfig = field(default_factory=GitConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    documents: DocumentsConfig = field(default_factory=DocumentsConfig)

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax, e.g. ``token: "${GITHUB_TOKEN}"``.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_RE.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".onboarder" / "config.yaml",
        start_path / "onboarder.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def load_config_from_dict(data: dict[str, Any]) -> OnboarderConfig:
    """Load configuration from a dictionary.

    Unknown keys inside a section are rejected so typos do not silently fall
    back to defaults.

    Args:
        data: Configuration dictionary

    Returns:
        OnboarderConfig instance
    """
    data = substitute_env_vars(data)

    config = OnboarderConfig()

    try:
        if "git" in data:
            config.git = GitConfig(**_section(data, "git"))
        if "analysis" in data:
            config.analysis = AnalysisConfig(**_section(data, "analysis"))
        if "llm" in data:
            config.llm = LLMConfig.from_dict(_section(data, "llm"))
        if "retry" in data:
            config.retry = RetryConfig(**_section(data, "retry"))
        if "cache" in data:
            config.cache = CacheConfig(**_section(data, "cache"))
        if "output" in data:
            config.output = OutputConfig(**_section(data, "output"))
        if "documents" in data:
            config.documents = DocumentsConfig(**_section(data, "documents"))
    except TypeError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> OnboarderConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        OnboarderConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = OnboarderConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# repo-onboarder configuration

# Repository access
git:
  workdir: ".onboarder/work"      # each run clones into a fresh subdirectory
  username: "x-access-token"
  # token: "${GITHUB_TOKEN}"      # required for private repositories

# Commit history analysis
analysis:
  max_commits: 200                # 0 = unlimited
  max_changed_files: 200          # per commit, 0 = unlimited
  include_patch: false
  max_patch_chars: 4000
  max_report_files: 300

# Generation backend (gemini supports context caching)
llm:
  provider: "gemini"              # gemini, claude, ollama, bedrock
  model: "gemini-2.5-flash"
  api_key: "${GEMINI_API_KEY}"
  temperature: 0
  max_tokens: 16384

# Retry policy for generation calls
retry:
  max_attempts: 3
  initial_delay_ms: 1000
  multiplier: 2.0
  max_delay_ms: 30000
  # timeout_seconds: 1800

# Repository context cache
cache:
  enabled: true
  backend: "gemini"               # gemini, memory
  ttl_seconds: 3600
  min_tokens: 32768

# Output
output:
  directory: "onboarding-docs"
  git_report: "GIT_REPORT.md"
  debug: false
  debug_directory: ".onboarder/debug"
  write_payloads: false

# Documents
documents:
  target_language: "English"
  include_tests: false
  judge: false
'''
