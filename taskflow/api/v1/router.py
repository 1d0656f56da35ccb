"""
Main API router for v1 endpoints
"""
import time
from fastapi import APIRouter

from taskflow.api.v1.endpoints import boards, columns, profiles, tasks, websocket

api_router = APIRouter(prefix="/v1")


@api_router.get("/")
async def api_root():
    """API v1 root endpoint"""
    return {
        "success": True,
        "data": {
            "message": "Taskflow Board API v1",
            "endpoints": {
                "profiles": "/api/v1/profiles",
                "boards": "/api/v1/boards",
                "columns": "/api/v1/columns",
                "tasks": "/api/v1/tasks",
                "websocket": "/api/v1/ws/boards/{board_id}"
            }
        },
        "timestamp": time.time()
    }


# Include all endpoint routers
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
api_router.include_router(boards.router, prefix="/boards", tags=["Boards"])
api_router.include_router(columns.router, prefix="/columns", tags=["Columns"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(websocket.router, tags=["WebSocket"])
