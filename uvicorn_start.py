#!/usr/bin/env python3
"""
StoryPad API Server
Uvicorn start script - serves the combined FastAPI + Socket.IO app from storypad_api.main
"""

import os
import sys

# CRITICAL: Set Windows event loop policy FIRST, before any other imports
if sys.platform == "win32":
    import asyncio
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv
load_dotenv()

# For development server
if __name__ == "__main__":
    import uvicorn

    # Room state lives in this process, so a single worker only
    uvicorn.run(
        "storypad_api.main:asgi_app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "5000")),
        reload=os.environ.get("STORYPAD_ENV", "production") == "development",
        reload_dirs=["storypad_api"],
        reload_delay=0.25,  # Add small delay to prevent multiple reloads
        log_level="info",
        use_colors=True,
        access_log=True
    )
