from pydantic import BaseModel
from typing import Optional


class RoomMember(BaseModel):
    id: str
    username: str

class RoomSummary(BaseModel):
    name: str
    member_count: int
    floor_holder: Optional[str] = None

class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]

class RoomDetailsResponse(BaseModel):
    name: str
    member_count: int
    members: list[RoomMember]
    floor_holder: Optional[str] = None
