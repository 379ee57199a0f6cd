import asyncio
from typing import Dict, Optional, Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from constants import SEND_QUEUE_SIZE
from logging_config import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    def send(self, connection_id: str, message: dict) -> bool:
        ...


class ConnectionManager:
    """Per-connection outbound queues.

    Core code calls send() from inside its critical section; send() never
    awaits. One writer task per connection drains its queue to the socket, so
    each client sees messages in the order the core produced them.
    """

    def __init__(self, queue_size: int = SEND_QUEUE_SIZE):
        self.queue_size = queue_size
        # Format: {connection_id: queue}
        self.queues: Dict[str, asyncio.Queue] = {}

    def open(self, connection_id: str) -> asyncio.Queue:
        queue = asyncio.Queue(maxsize=self.queue_size)
        self.queues[connection_id] = queue
        logger.debug(f"Opened send queue for connection {connection_id} (open: {len(self.queues)})")
        return queue

    def close(self, connection_id: str):
        queue = self.queues.pop(connection_id, None)
        if queue is None:
            return
        try:
            queue.put_nowait(None)
        except asyncio.QueueFull:
            # writer gets cancelled by the endpoint anyway
            pass
        logger.debug(f"Closed send queue for connection {connection_id} (open: {len(self.queues)})")

    def send(self, connection_id: str, message: dict) -> bool:
        queue = self.queues.get(connection_id)
        if queue is None:
            logger.debug(f"Dropping {message.get('type')} for unknown connection {connection_id}")
            return False
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"Send queue full for connection {connection_id}, dropping {message.get('type')}")
            return False
        return True

    async def writer(self, connection_id: str, websocket: WebSocket, queue: Optional[asyncio.Queue] = None):
        """Drain a connection's queue to its websocket until closed."""
        if queue is None:
            queue = self.queues[connection_id]
        sent = 0
        while True:
            message = await queue.get()
            if message is None:
                break
            if websocket.client_state != WebSocketState.CONNECTED:
                logger.debug(f"Websocket for {connection_id} no longer connected, stopping writer")
                break
            try:
                await websocket.send_json(message)
                sent += 1
            except Exception as e:
                logger.warning(f"Error sending to connection {connection_id}: {e}")
                break
        logger.debug(f"Writer for connection {connection_id} finished after {sent} messages")
