import os
import sys

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()


# ==============================================================================
# DEBUG FUNCTIONS
# ==============================================================================
def _emit(prefix: str, msg: str) -> None:
    print(f"[{prefix}] {msg}")
    sys.stdout.flush()


def print__debug(msg: str) -> None:
    """Print DEBUG messages when debug mode is enabled.

    Args:
        msg: The message to print
    """
    if os.environ.get("DEBUG", "0") == "1":
        _emit("DEBUG", msg)


def print__token_debug(msg: str) -> None:
    """Print print__token_debug messages when debug mode is enabled.

    Args:
        msg: The message to print
    """
    if os.environ.get("print__token_debug", "0") == "1":
        _emit("print__token_debug", msg)


def print__auth_debug(msg: str) -> None:
    """Print login/refresh/logout route messages when enabled."""
    if os.environ.get("print__auth_debug", "0") == "1":
        _emit("print__auth_debug", msg)


def print__relay_debug(msg: str) -> None:
    """Print collaboration relay messages (joins, fan-out, disconnects)."""
    if os.environ.get("print__relay_debug", "0") == "1":
        _emit("print__relay_debug", msg)


def print__startup_debug(msg: str) -> None:
    """Print application startup/shutdown messages when enabled.

    Args:
        msg: The message to print
    """
    if os.environ.get("print__startup_debug", "0") == "1":
        _emit("print__startup_debug", msg)
