from identity import Identity
from registry import Connection, RoomRegistry, display_name, normalize_room_name


def test_normalize_room_name_defaults_to_main():
    assert normalize_room_name(None) == "main"
    assert normalize_room_name("") == "main"
    assert normalize_room_name("   ") == "main"
    assert normalize_room_name(" lobby ") == "lobby"


def test_ensure_is_idempotent():
    registry = RoomRegistry()
    first = registry.ensure("lobby")
    second = registry.ensure("lobby")
    assert first is second
    assert registry.ensure(None) is registry.ensure("main")
    assert len(registry.rooms()) == 2


def test_members_of_unknown_room_is_empty_and_does_not_create_it():
    registry = RoomRegistry()
    assert registry.members("ghost") == set()
    assert registry.get("ghost") is None


def test_members_returns_a_copy():
    registry = RoomRegistry()
    registry.add_member("lobby", "c1")
    members = registry.members("lobby")
    members.add("c2")
    assert registry.members("lobby") == {"c1"}


def test_prune_only_drops_idle_rooms():
    registry = RoomRegistry()
    room = registry.add_member("lobby", "c1")
    assert registry.prune("lobby") is False

    registry.remove_member("lobby", "c1")
    room.floor_holder = "c1"
    assert registry.prune("lobby") is False

    room.floor_holder = None
    assert registry.prune("lobby") is True
    assert registry.get("lobby") is None
    assert registry.prune("lobby") is False


def test_connection_table():
    registry = RoomRegistry()
    connection = Connection("c1", Identity(id="u1", username="alice"))
    registry.register(connection)
    assert registry.connection("c1") is connection
    assert registry.connection(None) is None
    assert registry.unregister("c1") is connection
    assert registry.unregister("c1") is None
    assert registry.connections() == []


def test_display_name_placeholder():
    assert display_name("abcdef123456", None) == "User_abcdef12"
    assert display_name("abcdef123456", Identity(id="u", username="")) == "User_abcdef12"
    assert Connection("c1", Identity(id="u", username="bob")).display_name == "bob"
