"""Utility modules.

- logging: Logging with human/verbose/JSON modes and credential masking
- cancellation: Cooperative cancellation with deadlines
"""

from onboarder.utils.cancellation import CancelToken
from onboarder.utils.logging import get_logger, redact_credentials, setup_logging

__all__ = [
    "CancelToken",
    "get_logger",
    "redact_credentials",
    "setup_logging",
]
