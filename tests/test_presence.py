from registry import Connection


def test_join_publishes_member_list_to_every_member(core, notifier):
    core.connect("a", "alice", "lobby")
    notifier.clear()
    core.connect("b", "bob", "lobby")

    peers = notifier.of_type("peers")
    assert sorted(c for c, _ in peers) == ["a", "b"]
    message = peers[0][1]
    assert message["room"] == "lobby"
    assert message["floor_holder"] is None
    assert sorted((p["id"], p["username"]) for p in message["peers"]) == [("a", "alice"), ("b", "bob")]


def test_presence_uses_placeholder_when_identity_missing(core, notifier):
    core.registry.register(Connection("0123456789ab"))
    core.lifecycle.join("0123456789ab", "lobby")

    message = notifier.to("0123456789ab", "peers")[-1]
    assert message["peers"] == [{"id": "0123456789ab", "username": "User_01234567"}]


def test_publish_to_empty_or_unknown_room_sends_nothing(core, notifier):
    assert core.presence.publish("nowhere") == 0
    core.registry.ensure("empty")
    assert core.presence.publish("empty") == 0
    assert notifier.sent == []


def test_snapshot_of_unknown_room(core):
    snapshot = core.presence.snapshot(None)
    assert snapshot.room == "main"
    assert snapshot.peers == []


def test_presence_after_leave_reflects_released_floor(core, notifier):
    core.connect("a", room="lobby")
    core.connect("b", room="lobby")
    core.lifecycle.request_floor("a")
    notifier.clear()

    core.lifecycle.disconnect("a")

    kinds = [m["type"] for c, m in notifier.sent if c == "b"]
    assert kinds == ["floor-released", "peers"]
    peers = notifier.to("b", "peers")[0]
    assert peers["floor_holder"] is None
    assert [p["id"] for p in peers["peers"]] == ["b"]
