"""
Utility functions package for the StoryPad API server.

This package contains debug printing, error reporting and duration helpers.
"""

from .debug import (
    print__auth_debug,
    print__debug,
    print__relay_debug,
    print__startup_debug,
    print__token_debug,
)
from .durations import format_duration, parse_duration
from .errors import log_comprehensive_error

__all__ = [
    "print__auth_debug",
    "print__debug",
    "print__relay_debug",
    "print__startup_debug",
    "print__token_debug",
    "format_duration",
    "parse_duration",
    "log_comprehensive_error",
]
