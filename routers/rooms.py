from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomDetailsResponse, RoomListResponse, RoomMember, RoomSummary
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("", response_model=RoomListResponse)
async def list_rooms(request: Request):
    hub = request.app.state.hub
    with hub.lifecycle.lock:
        summaries = [
            RoomSummary(name=room.name, member_count=len(room.members), floor_holder=room.floor_holder)
            for room in hub.registry.rooms()
        ]
    summaries.sort(key=lambda r: r.name)
    logger.debug(f"Listed {len(summaries)} rooms")
    return RoomListResponse(rooms=summaries)


@rooms_router.get("/{room_name}", response_model=RoomDetailsResponse)
async def get_room_details(room_name: str, request: Request):
    """
    Read-only view of a room's live state.

    Returns:
    - name: Room name
    - member_count: Number of connections currently in the room
    - members: Connection id and display name of each member
    - floor_holder: Connection id holding the floor, or null
    """
    hub = request.app.state.hub
    with hub.lifecycle.lock:
        room = hub.registry.get(room_name)
        if room is None:
            logger.info(f"Room details failed: Room {room_name} not found")
            raise HTTPException(status_code=404, detail="Room not found")
        snapshot = hub.presence.snapshot(room.name)

    return RoomDetailsResponse(
        name=snapshot.room,
        member_count=len(snapshot.peers),
        members=[RoomMember(id=p.id, username=p.username) for p in snapshot.peers],
        floor_holder=snapshot.floor_holder,
    )
