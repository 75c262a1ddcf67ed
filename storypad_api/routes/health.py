import time
from datetime import datetime

import psutil
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from storypad_api.config import settings
from storypad_api.utils.errors import log_comprehensive_error

# Create router for health endpoints
router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check with process memory and live relay room occupancy."""
    try:
        registry = request.app.state.room_registry
        process = psutil.Process()
        memory_info = process.memory_info()

        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "uptime_seconds": time.time() - settings.start_time,
            "memory": {
                "rss_mb": round(memory_info.rss / 1024 / 1024, 2),
                "percent": round(process.memory_percent(), 2),
            },
            "active_connections": len(registry),
            "rooms": registry.room_sizes(),
            "registered_users": len(request.app.state.user_store),
        }
    except Exception as e:
        log_comprehensive_error("health_check", e, request)
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": str(e),
                "timestamp": datetime.now().isoformat(),
            },
        )
