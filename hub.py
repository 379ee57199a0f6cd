from connections import ConnectionManager
from constants import PRUNE_EMPTY_ROOMS, SEND_QUEUE_SIZE
from floor import FloorController
from identity import IdentityBinder, IdentityProvider
from lifecycle import LifecycleCoordinator
from presence import PresenceBroadcaster
from registry import RoomRegistry
from relay import SignalingRelay


class SignalingHub:
    """Owns one registry and the components that operate on it. One per application."""

    def __init__(self, identity_provider: IdentityProvider, prune_empty_rooms: bool = PRUNE_EMPTY_ROOMS, queue_size: int = SEND_QUEUE_SIZE):
        self.registry = RoomRegistry()
        self.connections = ConnectionManager(queue_size=queue_size)
        self.binder = IdentityBinder(identity_provider)
        self.floor = FloorController(self.registry, self.connections)
        self.presence = PresenceBroadcaster(self.registry, self.connections)
        self.relay = SignalingRelay(self.registry, self.connections)
        self.lifecycle = LifecycleCoordinator(
            self.registry,
            self.connections,
            self.floor,
            self.presence,
            self.relay,
            prune_empty_rooms=prune_empty_rooms,
        )
