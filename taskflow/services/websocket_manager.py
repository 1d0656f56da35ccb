"""
WebSocket connection manager for board change streams
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Dict, Set
from uuid import UUID
from fastapi import WebSocket

from taskflow.services.change_notifier import ChangeEvent, ChangeNotifier, Subscription, notifier as default_notifier

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks sockets per board room and forwards change events to them"""

    def __init__(self, notifier: ChangeNotifier = None):
        self.notifier = notifier or default_notifier

        # Board rooms (sockets watching a board)
        self.board_rooms: Dict[UUID, Set[WebSocket]] = {}

        # One notifier subscription per non-empty room
        self.subscriptions: Dict[UUID, Subscription] = {}

        # Pending sends scheduled from notifier callbacks
        self.pending: Set[asyncio.Task] = set()

    async def connect(self, websocket: WebSocket, board_id: UUID, user_id: UUID):
        """Accept a WebSocket connection and join the board room"""
        await websocket.accept()

        room = self.board_rooms.setdefault(board_id, set())
        room.add(websocket)
        if board_id not in self.subscriptions:
            self.subscriptions[board_id] = self.notifier.subscribe(board_id, self._on_change)

        logger.info(f"WebSocket connected: user {user_id}, board {board_id}")

    def disconnect(self, websocket: WebSocket, board_id: UUID):
        """Leave the board room; the last socket out drops the subscription"""
        room = self.board_rooms.get(board_id)
        if room is not None:
            room.discard(websocket)
            if not room:
                del self.board_rooms[board_id]
                subscription = self.subscriptions.pop(board_id, None)
                if subscription is not None:
                    subscription.unsubscribe()

        logger.info(f"WebSocket disconnected from board {board_id}")

    def _on_change(self, event: ChangeEvent) -> None:
        task = asyncio.get_running_loop().create_task(self.broadcast_change(event))
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)

    async def send_message(self, websocket: WebSocket, message: dict) -> bool:
        try:
            await websocket.send_text(json.dumps(message))
            return True
        except Exception as e:
            logger.warning(f"Error sending WebSocket message: {e}")
            return False

    async def broadcast_change(self, event: ChangeEvent) -> int:
        """Send a board_changed message to every socket watching the board"""
        message = {
            "type": "board_changed",
            "payload": event.model_dump(mode="json"),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        sent_count = 0
        broken = []
        for websocket in list(self.board_rooms.get(event.board_id, ())):
            if await self.send_message(websocket, message):
                sent_count += 1
            else:
                broken.append(websocket)

        # Clean up broken connections
        for websocket in broken:
            self.disconnect(websocket, event.board_id)

        return sent_count

    async def handle_message(self, websocket: WebSocket, message: dict):
        """Handle incoming WebSocket messages"""
        if message.get("type") == "ping":
            await self.send_message(websocket, {
                "type": "pong",
                "timestamp": datetime.now(timezone.utc).isoformat()
            })
        else:
            await self.send_message(websocket, {
                "type": "error",
                "message": f"Unknown message type: {message.get('type')}",
                "timestamp": datetime.now(timezone.utc).isoformat()
            })

    def get_connection_stats(self):
        """Get connection statistics"""
        return {
            "total_connections": sum(len(room) for room in self.board_rooms.values()),
            "board_rooms": {str(board_id): len(room) for board_id, room in self.board_rooms.items()},
        }


# Global connection manager instance
manager = ConnectionManager()
