import threading
from typing import Optional

from connections import Notifier
from constants import PRUNE_EMPTY_ROOMS
from floor import FloorController
from identity import Identity
from logging_config import get_logger
from presence import PresenceBroadcaster
from registry import Connection, RoomRegistry, normalize_room_name
from relay import SignalingRelay
from schemas.signaling import RoomJoinedMessage

logger = get_logger(__name__)


class LifecycleCoordinator:
    """Runs join, room-switch, floor, relay and disconnect sequences.

    Each public method is one atomic unit under a registry-wide lock. None of
    them awaits; outbound messages are queued by the notifier and written
    after the lock is gone.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        notifier: Notifier,
        floor: FloorController,
        presence: PresenceBroadcaster,
        relay: SignalingRelay,
        prune_empty_rooms: bool = PRUNE_EMPTY_ROOMS,
    ):
        self.registry = registry
        self.notifier = notifier
        self.floor = floor
        self.presence = presence
        self.signaling = relay
        self.prune_empty_rooms = prune_empty_rooms
        self.lock = threading.RLock()

    def admit(self, connection_id: str, identity: Identity) -> Connection:
        with self.lock:
            connection = Connection(connection_id, identity)
            self.registry.register(connection)
            logger.info(f"Admitted connection {connection_id} for user {identity.id} ({identity.username})")
            return connection

    def join(self, connection_id: str, room: Optional[str] = None) -> Optional[str]:
        """Initial join. Falls through to switch() if the connection is already in a room."""
        with self.lock:
            connection = self.registry.connection(connection_id)
            if connection is None:
                logger.warning(f"Join for unknown connection {connection_id} ignored")
                return None
            if connection.room is not None:
                return self.switch(connection_id, room)
            return self._enter(connection, normalize_room_name(room), previous_room=None)

    def switch(self, connection_id: str, room: Optional[str]) -> Optional[str]:
        with self.lock:
            connection = self.registry.connection(connection_id)
            if connection is None:
                logger.warning(f"Room switch for unknown connection {connection_id} ignored")
                return None
            new_room = normalize_room_name(room)
            old_room = connection.room
            if old_room is None:
                return self._enter(connection, new_room, previous_room=None)

            if old_room == new_room:
                logger.debug(f"Connection {connection_id} already in room {new_room}")
                confirm = RoomJoinedMessage(room=new_room, previous_room=new_room)
                self.notifier.send(connection_id, confirm.model_dump())
                return new_room

            self._leave(connection)
            logger.info(f"Connection {connection_id} switching room {old_room} -> {new_room}")
            return self._enter(connection, new_room, previous_room=old_room)

    def request_floor(self, connection_id: str) -> bool:
        with self.lock:
            connection = self._joined(connection_id, "floor request")
            if connection is None:
                return False
            room = self.registry.ensure(connection.room)
            return self.floor.request(connection, room)

    def release_floor(self, connection_id: str) -> bool:
        with self.lock:
            connection = self._joined(connection_id, "floor release")
            if connection is None:
                return False
            room = self.registry.ensure(connection.room)
            return self.floor.release(connection, room)

    def relay(self, connection_id: str, kind: str, to_connection_id: Optional[str], payload: Optional[dict]) -> bool:
        with self.lock:
            connection = self._joined(connection_id, f"{kind} relay")
            if connection is None:
                return False
            return self.signaling.relay(kind, connection, to_connection_id, payload)

    def disconnect(self, connection_id: str) -> bool:
        """Tear down a connection. Safe to call more than once."""
        with self.lock:
            connection = self.registry.connection(connection_id)
            if connection is None:
                logger.debug(f"Disconnect for unknown connection {connection_id}, nothing to do")
                return False
            if connection.room is not None:
                self._leave(connection)
            self.registry.unregister(connection_id)
            logger.info(f"Connection {connection_id} disconnected")
            return True

    def _joined(self, connection_id: str, action: str) -> Optional[Connection]:
        connection = self.registry.connection(connection_id)
        if connection is None or connection.room is None:
            logger.debug(f"Ignoring {action} from connection {connection_id} outside any room")
            return None
        return connection

    def _enter(self, connection: Connection, room_name: str, previous_room: Optional[str]) -> str:
        self.registry.add_member(room_name, connection.connection_id)
        connection.room = room_name
        logger.info(f"Connection {connection.connection_id} ({connection.display_name}) joined room {room_name}")
        confirm = RoomJoinedMessage(room=room_name, previous_room=previous_room)
        self.notifier.send(connection.connection_id, confirm.model_dump())
        self.presence.publish(room_name)
        return room_name

    def _leave(self, connection: Connection):
        # membership first, then the floor, then presence: observers never see
        # the departed member as holder
        room_name = connection.room
        room = self.registry.remove_member(room_name, connection.connection_id)
        connection.room = None
        if room is None:
            return
        self.floor.release(connection, room)
        self.presence.publish(room.name)
        logger.info(f"Connection {connection.connection_id} left room {room.name} ({len(room.members)} remaining)")
        if self.prune_empty_rooms:
            self.registry.prune(room.name)
