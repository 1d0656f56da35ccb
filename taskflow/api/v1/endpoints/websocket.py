"""
WebSocket endpoint streaming board change events
"""
import json
from uuid import UUID
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from taskflow.core.database import async_session_factory
from taskflow.core.deps import get_current_user
from taskflow.core.exceptions import APIException
from taskflow.core.logging import get_context_logger
from taskflow.core.permissions import require_board_member
from taskflow.models.profile import Profile
from taskflow.services.websocket_manager import manager

router = APIRouter()


@router.websocket("/ws/boards/{board_id}")
async def board_websocket(
    websocket: WebSocket,
    board_id: UUID,
    user_id: UUID = Query(...)
):
    """
    Stream ``board_changed`` messages for one board.

    Messages carry no state; clients refetch the board aggregate.
    """
    logger = get_context_logger(__name__, board_id=str(board_id), user_id=str(user_id))
    try:
        async with async_session_factory() as db:
            await require_board_member(db, board_id, user_id)
    except APIException as e:
        logger.info(f"WebSocket refused: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await manager.connect(websocket, board_id, user_id)
    await manager.send_message(websocket, {
        "type": "connection_established",
        "board_id": str(board_id),
        "user_id": str(user_id),
    })

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_message(websocket, {"type": "error", "message": "Invalid JSON format"})
                continue
            await manager.handle_message(websocket, message)
    except WebSocketDisconnect:
        logger.debug("WebSocket closed by client")
    finally:
        manager.disconnect(websocket, board_id)


@router.get("/ws/stats")
async def get_websocket_stats(current_user: Profile = Depends(get_current_user)):
    """Get WebSocket connection statistics"""
    return {
        "success": True,
        "data": manager.get_connection_stats()
    }
