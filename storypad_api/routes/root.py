from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness banner."""
    return "✅ StoryPad API is running!"


@router.get("/api")
async def api_index():
    """Map of the HTTP endpoints and Socket.IO events this server offers."""
    return {
        "message": "StoryPad API",
        "auth_endpoints": {
            "signup": "/api/signup",
            "login": "/api/login",
            "refresh": "/api/refresh",
            "logout": "/api/logout",
        },
        "monitoring": {"health": "/health"},
        "socket_events": {
            "client_to_server": ["join-story", "text-change", "cursor-change"],
            "server_to_client": [
                "active-users",
                "user-joined",
                "user-left",
                "text-change",
                "cursor-change",
            ],
        },
    }
