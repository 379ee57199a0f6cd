from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing import Annotated, Literal, Optional, Union


# Client -> server

class JoinRoomRequest(BaseModel):
    type: Literal["join-room"]
    room: Optional[str] = None

class RequestFloorRequest(BaseModel):
    type: Literal["request-floor"]

class ReleaseFloorRequest(BaseModel):
    type: Literal["release-floor"]

class PingRequest(BaseModel):
    type: Literal["ping"]

class SignalRequest(BaseModel):
    """Offer, answer or ICE candidate. Everything besides `type` and `to` is the opaque payload."""
    model_config = ConfigDict(extra="allow")

    type: Literal["webrtc-offer", "webrtc-answer", "webrtc-ice"]
    to: str = Field(min_length=1)

    @property
    def payload(self) -> dict:
        return dict(self.model_extra or {})


ClientMessage = Annotated[
    Union[JoinRoomRequest, RequestFloorRequest, ReleaseFloorRequest, PingRequest, SignalRequest],
    Field(discriminator="type"),
]
client_message_adapter = TypeAdapter(ClientMessage)

SIGNAL_KINDS = {
    "offer": "webrtc-offer",
    "answer": "webrtc-answer",
    "ice-candidate": "webrtc-ice",
}
KIND_BY_WIRE_TYPE = {wire: kind for kind, wire in SIGNAL_KINDS.items()}


# Server -> client

class UserInfo(BaseModel):
    id: str
    username: str

class ConnectedMessage(BaseModel):
    type: Literal["connected"] = "connected"
    connection_id: str
    user: UserInfo

class RoomJoinedMessage(BaseModel):
    """Confirms the connection is now in `room`.

    When `previous_room` differs from `room`, any floor held in
    `previous_room` has been released. The departing connection is not sent
    that room's `floor-released`, so clients clear local push-to-talk state
    on this message.
    """
    type: Literal["room-joined"] = "room-joined"
    room: str
    previous_room: Optional[str] = None

class Peer(BaseModel):
    id: str
    username: str

class PeersMessage(BaseModel):
    type: Literal["peers"] = "peers"
    room: str
    peers: list[Peer]
    floor_holder: Optional[str] = None

class FloorGrantedMessage(BaseModel):
    type: Literal["floor-granted"] = "floor-granted"
    room: str
    holder: str
    username: str

class FloorDeniedMessage(BaseModel):
    type: Literal["floor-denied"] = "floor-denied"
    room: str
    holder: str

class FloorReleasedMessage(BaseModel):
    type: Literal["floor-released"] = "floor-released"
    room: str
    holder: str

class PongMessage(BaseModel):
    type: Literal["pong"] = "pong"
