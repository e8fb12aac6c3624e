"""Unit tests for response cleanup."""

import pytest

from onboarder.errors import ErrorKind, OnboarderError
from onboarder.llm.extract import clean_response, extract_document


class TestCleanResponse:
    """Tests for clean_response."""

    def test_markdown_fence(self) -> None:
        """Test a markdown-tagged fence is removed."""
        assert clean_response("```markdown\nHello\n```") == "Hello"

    def test_json_fence(self) -> None:
        """Test a json-tagged fence is removed."""
        assert clean_response('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_untagged_fence(self) -> None:
        """Test a bare fence is removed."""
        assert clean_response("```\n# Title\n```") == "# Title"

    def test_analysis_block_dropped(self) -> None:
        """Test a leading analysis block is discarded through its end marker."""
        text = "<analysis>\nplanning the document\n</analysis>\n\n# README\nBody"

        assert clean_response(text) == "# README\nBody"

    def test_analysis_then_fence(self) -> None:
        """Test both wrappers are removed in order."""
        text = "<analysis>notes</analysis>\n```markdown\n# Doc\n```"

        assert clean_response(text) == "# Doc"

    def test_inner_fences_kept(self) -> None:
        """Test content is kept up to the last closing fence."""
        text = "```markdown\n# Usage\n```bash\nmake test\n```\nDone\n```"

        assert clean_response(text) == "# Usage\n```bash\nmake test\n```\nDone"

    def test_unclosed_fence_returned_trimmed(self) -> None:
        """Test an opening fence without a closing one is left as is."""
        assert clean_response("```markdown") == "```markdown"

    def test_plain_text_unchanged(self) -> None:
        """Test text without wrappers is only trimmed."""
        assert clean_response("  # Title\n\nBody  \n") == "# Title\n\nBody"

    @pytest.mark.parametrize(
        "text",
        [
            "```markdown\nHello\n```",
            "<analysis>x</analysis>\nBody",
            "# Already clean",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        """Test cleaning twice equals cleaning once."""
        once = clean_response(text)

        assert clean_response(once) == once

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty(self, text: str | None) -> None:
        """Test empty input yields an empty string."""
        assert clean_response(text) == ""


class TestExtractDocument:
    """Tests for extract_document."""

    def test_returns_cleaned_text(self) -> None:
        """Test usable content is returned cleaned."""
        assert extract_document("```markdown\n# Doc\n```", "README.md") == "# Doc"

    def test_nothing_left_is_parse_failure(self) -> None:
        """Test a response that cleans to nothing raises PARSE_FAILURE."""
        with pytest.raises(OnboarderError) as exc_info:
            extract_document("```markdown\n\n```", "README.md")

        assert exc_info.value.kind is ErrorKind.PARSE_FAILURE
        assert "README.md" in exc_info.value.message
