from typing import Dict, List, Optional, Set

from constants import DEFAULT_ROOM
from identity import Identity
from logging_config import get_logger

logger = get_logger(__name__)


def normalize_room_name(name: Optional[str]) -> str:
    if name is None:
        return DEFAULT_ROOM
    name = str(name).strip()
    return name or DEFAULT_ROOM


def display_name(connection_id: str, identity: Optional[Identity]) -> str:
    if identity is not None and identity.username:
        return identity.username
    return f"User_{connection_id[:8]}"


class Connection:
    def __init__(self, connection_id: str, identity: Optional[Identity] = None):
        self.connection_id = connection_id
        self.identity = identity
        # None until the initial join completes
        self.room: Optional[str] = None

    @property
    def display_name(self) -> str:
        return display_name(self.connection_id, self.identity)

    def __repr__(self):
        return f"Connection({self.connection_id!r}, room={self.room!r})"


class Room:
    def __init__(self, name: str):
        self.name = name
        self.members: Set[str] = set()
        self.floor_holder: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return not self.members and self.floor_holder is None

    def __repr__(self):
        return f"Room({self.name!r}, members={len(self.members)}, floor_holder={self.floor_holder!r})"


class RoomRegistry:
    """Sole owner of room and membership state.

    Not thread-safe on its own; callers serialize mutations (see lifecycle.py).
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._connections: Dict[str, Connection] = {}

    # rooms

    def ensure(self, name: Optional[str]) -> Room:
        name = normalize_room_name(name)
        room = self._rooms.get(name)
        if room is None:
            room = Room(name)
            self._rooms[name] = room
            logger.debug(f"Created room {name}")
        return room

    def get(self, name: Optional[str]) -> Optional[Room]:
        return self._rooms.get(normalize_room_name(name))

    def members(self, name: Optional[str]) -> Set[str]:
        room = self.get(name)
        if room is None:
            return set()
        return set(room.members)

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def add_member(self, name: Optional[str], connection_id: str) -> Room:
        room = self.ensure(name)
        room.members.add(connection_id)
        return room

    def remove_member(self, name: Optional[str], connection_id: str) -> Optional[Room]:
        room = self.get(name)
        if room is None:
            return None
        room.members.discard(connection_id)
        return room

    def prune(self, name: Optional[str]) -> bool:
        room = self.get(name)
        if room is None or not room.is_idle:
            return False
        del self._rooms[room.name]
        logger.debug(f"Pruned empty room {room.name}")
        return True

    # connections

    def register(self, connection: Connection):
        self._connections[connection.connection_id] = connection

    def connection(self, connection_id: Optional[str]) -> Optional[Connection]:
        if connection_id is None:
            return None
        return self._connections.get(connection_id)

    def unregister(self, connection_id: str) -> Optional[Connection]:
        return self._connections.pop(connection_id, None)

    def connections(self) -> List[Connection]:
        return list(self._connections.values())
