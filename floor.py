from connections import Notifier
from logging_config import get_logger
from registry import Connection, Room, RoomRegistry
from schemas.signaling import FloorDeniedMessage, FloorGrantedMessage, FloorReleasedMessage

logger = get_logger(__name__)


class FloorController:
    """Push-to-talk token per room. A room is either Free or Held(connection).

    No expiry: every path that removes the holder from its room calls
    release(), so a floor cannot outlive its holder's membership.
    """

    def __init__(self, registry: RoomRegistry, notifier: Notifier):
        self.registry = registry
        self.notifier = notifier

    def request(self, connection: Connection, room: Room) -> bool:
        if connection.connection_id not in room.members:
            logger.warning(f"Connection {connection.connection_id} requested floor in room {room.name} without being a member")
            return False

        if room.floor_holder is not None:
            logger.debug(f"Floor in room {room.name} denied to {connection.connection_id}, held by {room.floor_holder}")
            denied = FloorDeniedMessage(room=room.name, holder=room.floor_holder)
            self.notifier.send(connection.connection_id, denied.model_dump())
            return False

        room.floor_holder = connection.connection_id
        logger.info(f"Floor in room {room.name} granted to {connection.connection_id} ({connection.display_name})")
        granted = FloorGrantedMessage(room=room.name, holder=connection.connection_id, username=connection.display_name)
        self._broadcast(room, granted.model_dump())
        return True

    def release(self, connection: Connection, room: Room) -> bool:
        """Free the floor if `connection` holds it. Anything else is a silent no-op."""
        if room.floor_holder != connection.connection_id:
            return False

        room.floor_holder = None
        logger.info(f"Floor in room {room.name} released by {connection.connection_id}")
        released = FloorReleasedMessage(room=room.name, holder=connection.connection_id)
        self._broadcast(room, released.model_dump())
        return True

    def _broadcast(self, room: Room, message: dict):
        for member_id in sorted(room.members):
            self.notifier.send(member_id, message)
