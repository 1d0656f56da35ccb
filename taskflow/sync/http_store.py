"""
Board store client and change notifier speaking to the REST/WebSocket API
"""
import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

import aiohttp

from taskflow.config import settings
from taskflow.core.enums import Role
from taskflow.schemas.board import BoardAggregateResponse, MemberCreate
from taskflow.schemas.column import ColumnCreate
from taskflow.schemas.task import TaskCreate
from taskflow.services.change_notifier import ChangeEvent
from taskflow.sync.actions import BoardPatch, ColumnPatch, TaskPatch
from taskflow.sync.results import StoreResult, error_from_exception, kind_for_status
from taskflow.sync.state import BoardMember, BoardState, Column, Task

logger = logging.getLogger(__name__)


class HttpBoardStore:
    """aiohttp client for the board API, acting as ``user_id``

    Usable as an async context manager; a session passed in is left open.
    """

    def __init__(
        self,
        user_id: UUID,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ):
        self.user_id = user_id
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.http_timeout)
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def close(self) -> None:
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> StoreResult:
        url = f"{self.base_url}{path}"
        try:
            async with self._get_session().request(
                method, url, json=payload, headers={"X-User-Id": str(self.user_id)}
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None

                if response.status >= 400:
                    return self._error_result(response.status, body)
                return StoreResult.success(parse(body) if parse else body)
        except Exception as e:
            error = error_from_exception(e)
            logger.info(f"{method} {path} failed: {error.kind.value} {error.message}")
            return StoreResult(error=error)

    def _error_result(self, status_code: int, body: Any) -> StoreResult:
        message = f"HTTP {status_code}"
        details = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                message = error.get("message") or message
                details = error.get("details")
            elif body.get("detail"):
                message = str(body["detail"])
        logger.info(f"Board API error {status_code}: {message}")
        return StoreResult.failure(kind_for_status(status_code), message, status_code, details)

    async def fetch_board_aggregate(self, board_id: UUID) -> StoreResult[BoardState]:
        return await self._request(
            "GET", f"/boards/{board_id}",
            parse=lambda body: BoardState.from_aggregate(BoardAggregateResponse.model_validate(body)),
        )

    async def create_task(self, column_id: UUID, board_id: UUID, title: str,
                          task_id: Optional[UUID] = None, position: Optional[int] = None) -> StoreResult[Task]:
        try:
            payload = TaskCreate(id=task_id, title=title, position=position).model_dump(mode="json", exclude_none=True)
        except ValueError as e:
            return StoreResult(error=error_from_exception(e))
        return await self._request("POST", f"/columns/{column_id}/tasks", payload, Task.model_validate)

    async def update_task(self, task_id: UUID, patch: TaskPatch) -> StoreResult[Task]:
        payload = patch.model_dump(mode="json", exclude_unset=True, exclude={"id"})
        return await self._request("PATCH", f"/tasks/{task_id}", payload, Task.model_validate)

    async def move_task(self, task_id: UUID, target_column_id: UUID, new_position: int) -> StoreResult[bool]:
        payload = {"target_column_id": str(target_column_id), "position": new_position}
        return await self._request("PUT", f"/tasks/{task_id}/move", payload, lambda body: True)

    async def delete_task(self, task_id: UUID) -> StoreResult[bool]:
        return await self._request("DELETE", f"/tasks/{task_id}", parse=lambda body: True)

    async def create_column(self, board_id: UUID, title: str, column_id: Optional[UUID] = None,
                            color: Optional[str] = None) -> StoreResult[Column]:
        try:
            payload = ColumnCreate(id=column_id, title=title, color=color).model_dump(mode="json", exclude_none=True)
        except ValueError as e:
            return StoreResult(error=error_from_exception(e))
        return await self._request("POST", f"/boards/{board_id}/columns", payload, Column.model_validate)

    async def update_column(self, column_id: UUID, patch: ColumnPatch) -> StoreResult[Column]:
        payload = patch.model_dump(mode="json", exclude_unset=True, exclude={"id"})
        return await self._request("PATCH", f"/columns/{column_id}", payload, Column.model_validate)

    async def delete_column(self, column_id: UUID) -> StoreResult[bool]:
        return await self._request("DELETE", f"/columns/{column_id}", parse=lambda body: True)

    async def reorder_columns(self, board_id: UUID, column_ids: List[UUID]) -> StoreResult[bool]:
        payload = {"column_ids": [str(column_id) for column_id in column_ids]}
        return await self._request("PUT", f"/boards/{board_id}/columns/order", payload, lambda body: True)

    async def update_board(self, board_id: UUID, patch: BoardPatch) -> StoreResult[dict]:
        payload = patch.model_dump(mode="json", exclude_unset=True)
        return await self._request("PATCH", f"/boards/{board_id}", payload)

    async def add_member(self, board_id: UUID, email: str, role: str = Role.VIEWER.value) -> StoreResult[BoardMember]:
        try:
            payload = MemberCreate(email=email, role=role).model_dump(mode="json")
        except ValueError as e:
            return StoreResult(error=error_from_exception(e))
        return await self._request("POST", f"/boards/{board_id}/members", payload, BoardMember.model_validate)

    async def remove_member(self, board_id: UUID, user_id: UUID) -> StoreResult[bool]:
        return await self._request("DELETE", f"/boards/{board_id}/members/{user_id}", parse=lambda body: True)


class WebSocketSubscription:
    """Background listener for one board's change stream.

    Reconnects after ``retry_delay`` while active. A reconnect is reported to
    the callback with ``None`` since events may have been missed meanwhile.
    """

    def __init__(self, session: aiohttp.ClientSession, url: str, callback, retry_delay: float):
        self.session = session
        self.url = url
        self.callback = callback
        self.retry_delay = retry_delay
        self.active = True
        self.task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        connected_before = False
        while self.active:
            try:
                async with self.session.ws_connect(self.url) as ws:
                    if connected_before:
                        self.callback(None)
                    connected_before = True
                    async for msg in ws:
                        if msg.type == aiohttp.WSMsgType.TEXT:
                            self._handle(msg.data)
                        elif msg.type == aiohttp.WSMsgType.ERROR:
                            break
            except aiohttp.ClientError as e:
                logger.warning(f"Board change stream error on {self.url}: {e}")
            except Exception:
                logger.exception(f"Board change stream listener failed on {self.url}")
            if self.active:
                await asyncio.sleep(self.retry_delay)

    def _handle(self, data: str) -> None:
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            logger.debug("Ignoring non-JSON change stream message")
            return
        if not isinstance(message, dict) or message.get("type") != "board_changed":
            return
        try:
            event = ChangeEvent.model_validate(message.get("payload"))
        except ValueError:
            event = None
        self.callback(event)

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.task.cancel()


class WebSocketChangeNotifier:
    """Change notifier for remote clients, fed by ``/ws/boards/{board_id}``"""

    def __init__(
        self,
        user_id: UUID,
        session: aiohttp.ClientSession,
        base_url: Optional[str] = None,
        retry_delay: float = 1.0,
    ):
        self.user_id = user_id
        self.session = session
        base = (base_url or settings.api_base_url).rstrip("/")
        self.ws_base_url = "ws" + base[len("http"):] if base.startswith("http") else base
        self.retry_delay = retry_delay

    def url_for(self, board_id: UUID) -> str:
        return f"{self.ws_base_url}/ws/boards/{board_id}?user_id={self.user_id}"

    def subscribe(self, board_id: UUID, callback) -> WebSocketSubscription:
        return WebSocketSubscription(self.session, self.url_for(board_id), callback, self.retry_delay)

