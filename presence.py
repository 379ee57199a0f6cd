from connections import Notifier
from logging_config import get_logger
from registry import RoomRegistry, display_name, normalize_room_name
from schemas.signaling import Peer, PeersMessage

logger = get_logger(__name__)


class PresenceBroadcaster:
    def __init__(self, registry: RoomRegistry, notifier: Notifier):
        self.registry = registry
        self.notifier = notifier

    def snapshot(self, room_name: str) -> PeersMessage:
        room = self.registry.get(room_name)
        if room is None:
            return PeersMessage(room=normalize_room_name(room_name), peers=[])
        peers = []
        for member_id in sorted(room.members):
            connection = self.registry.connection(member_id)
            identity = connection.identity if connection else None
            peers.append(Peer(id=member_id, username=display_name(member_id, identity)))
        return PeersMessage(room=room.name, peers=peers, floor_holder=room.floor_holder)

    def publish(self, room_name: str) -> int:
        """Send the room's current member list to every member. Returns the number of recipients."""
        room = self.registry.get(room_name)
        if room is None or not room.members:
            return 0
        message = self.snapshot(room.name).model_dump()
        for member_id in sorted(room.members):
            self.notifier.send(member_id, message)
        logger.debug(f"Published presence for room {room.name}: {len(room.members)} members, floor_holder={room.floor_holder}")
        return len(room.members)
