from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.taskboard.domain.models import SessionState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ws"])


class StateConnectionManager:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def broadcast(self, payload: dict[str, object]) -> None:
        for websocket in list(self._connections):
            try:
                await websocket.send_json(payload)
            except (RuntimeError, WebSocketDisconnect):
                self.disconnect(websocket)


class WebSocketStateBroadcaster:
    """Session listener pushing every state change to connected clients."""

    def __init__(self, manager: StateConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, state: SessionState) -> None:
        if self._manager.connection_count == 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; state push skipped")
            return
        task = loop.create_task(self._manager.broadcast(state.model_dump(mode="json")))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


@router.websocket("/ws/state")
async def state_updates(websocket: WebSocket) -> None:
    manager: StateConnectionManager = websocket.app.state.connections
    session = websocket.app.state.session
    await manager.connect(websocket)
    await websocket.send_json(session.state().model_dump(mode="json"))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
