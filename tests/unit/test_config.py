"""Unit tests for configuration loading."""

from pathlib import Path
from typing import Any

import pytest

from onboarder.config import (
    AnalysisConfig,
    CacheConfig,
    OnboarderConfig,
    RetryConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_default_config(self) -> None:
        """Test defaults match the documented values."""
        config = OnboarderConfig()

        assert config.git.username == "x-access-token"
        assert config.git.token is None
        assert config.analysis.max_commits == 200
        assert config.analysis.max_changed_files == 200
        assert config.analysis.include_patch is False
        assert config.retry.max_attempts == 3
        assert config.retry.initial_delay_ms == 1000
        assert config.retry.multiplier == 2.0
        assert config.retry.max_delay_ms == 30000
        assert config.cache.backend == "gemini"
        assert config.cache.ttl_seconds == 3600
        assert config.output.directory == "onboarding-docs"
        assert config.documents.target_language == "English"
        assert config.documents.judge is False
        assert config.config_path is None


class TestValidation:
    """Tests for section validation in __post_init__."""

    def test_negative_max_commits_rejected(self) -> None:
        """Test negative commit limit raises ValueError."""
        with pytest.raises(ValueError, match="max_commits"):
            AnalysisConfig(max_commits=-1)

    def test_zero_attempts_rejected(self) -> None:
        """Test max_attempts below 1 raises ValueError."""
        with pytest.raises(ValueError, match="max_attempts"):
            RetryConfig(max_attempts=0)

    def test_shrinking_multiplier_rejected(self) -> None:
        """Test multiplier below 1 raises ValueError."""
        with pytest.raises(ValueError, match="multiplier"):
            RetryConfig(multiplier=0.5)

    def test_unknown_cache_backend_rejected(self) -> None:
        """Test unknown backend raises ValueError."""
        with pytest.raises(ValueError, match="Invalid cache backend"):
            CacheConfig(backend="redis")

    def test_non_positive_ttl_rejected(self) -> None:
        """Test zero TTL raises ValueError."""
        with pytest.raises(ValueError, match="ttl_seconds"):
            CacheConfig(ttl_seconds=0)


class TestLoadFromDict:
    """Tests for load_config_from_dict."""

    def test_full_config(self, full_config: dict[str, Any]) -> None:
        """Test every section is loaded."""
        config = load_config_from_dict(full_config)

        assert config.git.token == "secret-token"
        assert config.git.username == "bot"
        assert config.analysis.max_commits == 50
        assert config.analysis.include_patch is True
        assert config.llm.model == "gemini-2.5-pro"
        assert config.llm.max_tokens == 8192
        assert config.retry.max_attempts == 5
        assert config.retry.multiplier == 3.0
        assert config.cache.backend == "memory"
        assert config.cache.ttl_seconds == 600
        assert config.output.directory == "docs/onboarding"
        assert config.output.debug is True
        assert config.documents.target_language == "Polish"
        assert config.documents.judge is True

    def test_missing_sections_use_defaults(self) -> None:
        """Test absent sections keep their defaults."""
        config = load_config_from_dict({"documents": {"target_language": "German"}})

        assert config.documents.target_language == "German"
        assert config.retry.max_attempts == 3

    def test_unknown_key_rejected(self) -> None:
        """Test typos inside a section raise ValueError."""
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config_from_dict({"retry": {"max_attempt": 5}})

    def test_non_mapping_section_rejected(self) -> None:
        """Test a scalar section raises ValueError."""
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config_from_dict({"cache": "yes"})


class TestEnvSubstitution:
    """Tests for ${VAR} substitution."""

    def test_substitutes_nested_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test variables are replaced inside dicts and lists."""
        monkeypatch.setenv("ONBOARDER_TEST_TOKEN", "abc123")

        result = substitute_env_vars({"git": {"token": "${ONBOARDER_TEST_TOKEN}"}, "list": ["${ONBOARDER_TEST_TOKEN}"]})

        assert result == {"git": {"token": "abc123"}, "list": ["abc123"]}

    def test_missing_variable_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unset variable raises ValueError."""
        monkeypatch.delenv("ONBOARDER_UNSET_VAR", raising=False)

        with pytest.raises(ValueError, match="ONBOARDER_UNSET_VAR"):
            substitute_env_vars("${ONBOARDER_UNSET_VAR}")

    def test_non_strings_untouched(self) -> None:
        """Test numbers and booleans pass through."""
        assert substitute_env_vars(5) == 5
        assert substitute_env_vars(True) is True


class TestLoadConfig:
    """Tests for config file discovery and loading."""

    def test_find_config_file(self, tmp_path: Path) -> None:
        """Test .onboarder/config.yaml is discovered."""
        config_dir = tmp_path / ".onboarder"
        config_dir.mkdir()
        config_file = config_dir / "config.yaml"
        config_file.write_text("documents:\n  target_language: French\n")

        assert find_config_file(tmp_path) == config_file.resolve()

    def test_find_config_file_none(self, tmp_path: Path) -> None:
        """Test None is returned when no config exists."""
        assert find_config_file(tmp_path) is None

    def test_load_explicit_path(self, tmp_path: Path) -> None:
        """Test loading an explicit file records its path."""
        config_file = tmp_path / "onboarder.yaml"
        config_file.write_text("cache:\n  enabled: false\n")

        config = load_config(config_path=config_file)

        assert config.cache.enabled is False
        assert config.config_path == config_file

    def test_load_missing_explicit_path(self, tmp_path: Path) -> None:
        """Test a missing explicit file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "missing.yaml")

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test an empty YAML file yields the default config."""
        config_file = tmp_path / "onboarder.yaml"
        config_file.write_text("")

        config = load_config(config_path=config_file)

        assert config.retry.max_attempts == 3

    def test_default_config_round_trips(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test the generated default config loads back to the defaults."""
        monkeypatch.setenv("GEMINI_API_KEY", "key-from-env")
        config_file = tmp_path / "config.yaml"
        config_file.write_text(create_default_config())

        config = load_config(config_path=config_file)

        assert config.llm.api_key == "key-from-env"
        assert config.analysis.max_report_files == 300
        assert config.cache.min_tokens == 32768
