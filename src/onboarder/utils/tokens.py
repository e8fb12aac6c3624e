"""Payload size estimates for logging.

The estimate is diagnostic only: it never drives truncation or retries.
"""

CHARS_PER_TOKEN = 3.5


def estimate_tokens(text: str) -> int:
    """Rough token count: characters divided by 3.5, rounded."""
    return round(len(text) / CHARS_PER_TOKEN)


def describe_size(text: str) -> str:
    """Describe a prompt size, e.g. ``"7000 chars (6.84 KB), estimated tokens: ~2000"``."""
    chars = len(text)
    return f"{chars} chars ({chars / 1024:.2f} KB), estimated tokens: ~{estimate_tokens(text)}"
