import json
from datetime import datetime

from fastapi import Request

from storypad_api.utils.debug import print__debug


# ============================================================
# ERROR HANDLING AND UTILITIES
# ============================================================


def log_comprehensive_error(context: str, error: Exception, request: Request = None):
    """Log comprehensive error information with context.

    Creates a detailed error report including error type, message,
    timestamp, and optional request information.

    Args:
        context (str): Description of where/when the error occurred
        error (Exception): The exception that was raised
        request (Request, optional): FastAPI request object for additional context

    Note:
        - Does not raise exceptions
        - Outputs to storypad_api.utils.debug.print__debug
    """
    error_details = {
        "context": context,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "timestamp": datetime.now().isoformat(),
    }

    if request:
        error_details.update(
            {
                "method": request.method,
                "url": str(request.url),
                "client_ip": request.client.host if request.client else "unknown",
            }
        )

    print__debug(f"🚨 ERROR: {json.dumps(error_details, indent=2)}")
