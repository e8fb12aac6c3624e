"""Unit tests for payload size estimates."""

from onboarder.utils.tokens import describe_size, estimate_tokens


class TestEstimateTokens:
    """Tests for estimate_tokens."""

    def test_chars_over_three_and_a_half(self) -> None:
        """Test the estimate is characters / 3.5, rounded."""
        assert estimate_tokens("x" * 7000) == 2000
        assert estimate_tokens("x" * 5) == 1

    def test_empty(self) -> None:
        """Test an empty text has no tokens."""
        assert estimate_tokens("") == 0


class TestDescribeSize:
    """Tests for describe_size."""

    def test_format(self) -> None:
        """Test chars, KB and tokens are reported."""
        assert describe_size("x" * 7000) == "7000 chars (6.84 KB), estimated tokens: ~2000"
