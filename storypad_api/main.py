"""StoryPad FastAPI Backend Application

Entry point for the StoryPad server process. It hosts two things on one
ASGI application:

- the REST API (FastAPI): signup, login, token refresh, logout, the
  development-only session test routes, and health/root endpoints;
- the collaboration relay (python-socketio): story rooms that fan out
  chapter text, cursor positions and join/leave notices between editors.

`asgi_app` is what uvicorn serves: a socketio.ASGIApp that answers
Socket.IO traffic under /socket.io and forwards everything else (including
lifespan events) to the FastAPI `app`.

Process-wide state lives on `app.state`:

    app.state.user_store     in-memory user records (storypad_api.store)
    app.state.room_registry  relay room membership (storypad_api.realtime)

Room state is not shared between processes, so the relay must run as a
single worker.
"""

import os
import sys

# ==============================================================================
# ENVIRONMENT VARIABLES LOADING
# ==============================================================================
from dotenv import load_dotenv

load_dotenv()

# ==============================================================================
# PROJECT ROOT DIRECTORY CONFIGURATION
# ==============================================================================
try:
    from pathlib import Path

    BASE_DIR = Path(__file__).resolve().parents[1]  # Go up one level from storypad_api/main.py
except NameError:
    BASE_DIR = Path(os.getcwd())

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

# ==============================================================================
# STANDARD LIBRARY AND THIRD-PARTY IMPORTS
# ==============================================================================
from contextlib import asynccontextmanager
from datetime import datetime

import socketio
from fastapi import FastAPI

from storypad_api.config import settings
from storypad_api.exceptions.handlers import register_exception_handlers
from storypad_api.middleware.cors import setup_brotli_middleware, setup_cors_middleware
from storypad_api.realtime.relay import CollaborationRelay
from storypad_api.realtime.rooms import RoomRegistry
from storypad_api.routes.auth import router as auth_router
from storypad_api.routes.health import router as health_router
from storypad_api.routes.root import router as root_router
from storypad_api.store.user_store import UserStore
from storypad_api.utils.debug import print__startup_debug


# ==============================================================================
# APPLICATION LIFESPAN MANAGEMENT
# ==============================================================================
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Log startup and shutdown; report how many sockets were still joined."""
    started_at = datetime.now()
    print__startup_debug("🚀 StoryPad application starting up...")
    print__startup_debug(f"🌐 Socket.IO path: /{settings.SOCKETIO_PATH}")

    yield  # Application runs here, serving requests

    print__startup_debug("🛑 StoryPad application shutting down...")
    print__startup_debug(
        f"Application ran for {datetime.now() - started_at}; "
        f"{len(_app.state.room_registry)} socket(s) still joined"
    )


# ==============================================================================
# SOCKET.IO RELAY
# ==============================================================================
sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.CORS_ALLOWED_ORIGINS,
)
room_registry = RoomRegistry()
relay = CollaborationRelay(sio, room_registry)

# ==============================================================================
# FASTAPI APPLICATION INITIALIZATION
# ==============================================================================
app = FastAPI(
    title="StoryPad API",
    description="""Backend for StoryPad, a collaborative story-writing application.

## Features
- 🔐 Access/refresh token sessions with an absolute session deadline
- ✍️ Real-time co-editing relay over Socket.IO (`join-story`, `text-change`, `cursor-change`)

## Authentication
`/api/logout` and `/api/test/*` require a Bearer access token.
    """,
    version="1.0.0",
    lifespan=lifespan,
)

app.state.user_store = UserStore()
app.state.room_registry = room_registry

# ==============================================================================
# MIDDLEWARE REGISTRATION
# ==============================================================================
setup_cors_middleware(app)
setup_brotli_middleware(app)

# ==============================================================================
# EXCEPTION HANDLERS
# ==============================================================================
register_exception_handlers(app)

# ==============================================================================
# ROUTE REGISTRATION
# ==============================================================================
app.include_router(root_router, tags=["Root"])
app.include_router(health_router, tags=["Health & Monitoring"])
app.include_router(auth_router, tags=["Authentication"])

print__startup_debug("[SUCCESS] All route routers registered successfully")

# ==============================================================================
# COMBINED ASGI APPLICATION
# ==============================================================================
asgi_app = socketio.ASGIApp(
    sio, other_asgi_app=app, socketio_path=settings.SOCKETIO_PATH
)
