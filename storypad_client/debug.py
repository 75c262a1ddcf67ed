import os
import sys


# ==============================================================================
# DEBUG FUNCTIONS
# ==============================================================================
def print__session_debug(msg: str) -> None:
    """Print session manager messages (login, refresh, expiry, logout).

    Args:
        msg: The message to print
    """
    if os.environ.get("print__session_debug", "0") == "1":
        print(f"[print__session_debug] {msg}")
        sys.stdout.flush()


def print__editor_debug(msg: str) -> None:
    """Print collaborative editor messages (socket lifecycle, remote edits).

    Args:
        msg: The message to print
    """
    if os.environ.get("print__editor_debug", "0") == "1":
        print(f"[print__editor_debug] {msg}")
        sys.stdout.flush()
