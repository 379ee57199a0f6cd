import pytest
from fastapi.testclient import TestClient

from app import create_app
from floor import FloorController
from identity import Identity, StaticIdentityProvider
from lifecycle import LifecycleCoordinator
from presence import PresenceBroadcaster
from registry import RoomRegistry
from relay import SignalingRelay


class RecordingNotifier:
    """Collects everything the core would have sent, in order."""

    def __init__(self):
        self.sent = []

    def send(self, connection_id, message):
        self.sent.append((connection_id, message))
        return True

    def to(self, connection_id, type_=None):
        return [m for c, m in self.sent if c == connection_id and (type_ is None or m["type"] == type_)]

    def of_type(self, type_):
        return [(c, m) for c, m in self.sent if m["type"] == type_]

    def clear(self):
        self.sent.clear()


class Core:
    def __init__(self, prune_empty_rooms=True):
        self.registry = RoomRegistry()
        self.notifier = RecordingNotifier()
        self.floor = FloorController(self.registry, self.notifier)
        self.presence = PresenceBroadcaster(self.registry, self.notifier)
        self.relay = SignalingRelay(self.registry, self.notifier)
        self.lifecycle = LifecycleCoordinator(
            self.registry, self.notifier, self.floor, self.presence, self.relay,
            prune_empty_rooms=prune_empty_rooms,
        )

    def connect(self, connection_id, username=None, room=None):
        identity = Identity(id=f"user-{connection_id}", username=username or connection_id)
        self.lifecycle.admit(connection_id, identity)
        self.lifecycle.join(connection_id, room)
        return self.registry.connection(connection_id)


@pytest.fixture
def core():
    return Core()


@pytest.fixture
def notifier(core):
    return core.notifier


TOKENS = {
    "tok-alice": ("u-alice", "alice"),
    "tok-bob": ("u-bob", "bob"),
    "tok-carol": ("u-carol", "carol"),
}


@pytest.fixture
def identity_provider():
    provider = StaticIdentityProvider()
    for token, (user_id, username) in TOKENS.items():
        provider.add_user(user_id, username, token)
    return provider


@pytest.fixture
def test_app(identity_provider):
    return create_app(identity_provider=identity_provider)


@pytest.fixture
def client(test_app):
    # one event loop for every websocket session in a test
    with TestClient(test_app) as test_client:
        yield test_client
