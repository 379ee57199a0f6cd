from typing import Optional

from connections import Notifier
from errors import RelayDropped
from logging_config import get_logger
from registry import Connection, RoomRegistry
from schemas.signaling import SIGNAL_KINDS

logger = get_logger(__name__)


class SignalingRelay:
    """Room-scoped, best-effort forwarding of WebRTC negotiation blobs."""

    def __init__(self, registry: RoomRegistry, notifier: Notifier):
        self.registry = registry
        self.notifier = notifier

    def authorize(self, sender: Connection, to_connection_id: Optional[str]) -> Connection:
        target = self.registry.connection(to_connection_id)
        if target is None:
            raise RelayDropped(f"unknown target {to_connection_id}")
        if sender.room is None or target.room is None:
            raise RelayDropped("sender or target has not joined a room")
        if sender.room != target.room:
            raise RelayDropped(f"cross-room ({sender.room} -> {target.room})")
        return target

    def relay(self, kind: str, sender: Connection, to_connection_id: Optional[str], payload: Optional[dict]) -> bool:
        wire_type = SIGNAL_KINDS.get(kind)
        if wire_type is None:
            logger.warning(f"Unknown signaling kind {kind!r} from {sender.connection_id}")
            return False
        try:
            target = self.authorize(sender, to_connection_id)
        except RelayDropped as e:
            logger.debug(f"Dropped {wire_type} from {sender.connection_id}: {e}")
            return False

        message = dict(payload or {})
        message.pop("to", None)
        message["type"] = wire_type
        message["from"] = sender.connection_id
        delivered = self.notifier.send(target.connection_id, message)
        logger.debug(f"Relayed {wire_type} {sender.connection_id} -> {target.connection_id} in room {sender.room}")
        return delivered
