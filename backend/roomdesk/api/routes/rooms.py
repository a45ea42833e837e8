from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db, require_roles
from roomdesk.models.profile import Profile, ProfileRole
from roomdesk.models.room import Room
from roomdesk.schemas.room import RoomCreate, RoomExpansionOut, RoomOut
from roomdesk.schemas.shift_block import RoomCoverageOut
from roomdesk.services.audit import log_activity
from roomdesk.services.room_catalog import expand_room_name
from roomdesk.services.schedule_store import unassigned_catalog_rooms

router = APIRouter()


@router.get("", response_model=list[RoomOut])
def list_rooms(
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[RoomOut]:
    return list(db.execute(select(Room).order_by(Room.name.asc())).scalars())


@router.post("", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    current: Profile = Depends(require_roles(ProfileRole.admin)),
    db: Session = Depends(get_db),
) -> RoomOut:
    existing = db.execute(select(Room).where(Room.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")
    room = Room(name=payload.name)
    db.add(room)
    log_activity(db, actor=current, action="room.create", entity_type="room", details={"name": payload.name})
    db.commit()
    db.refresh(room)
    return room


@router.get("/expand", response_model=RoomExpansionOut)
def expand_room(
    name: str = Query(min_length=1, max_length=100),
    current: Profile = Depends(get_current_profile),
) -> RoomExpansionOut:
    rooms = expand_room_name(name)
    return RoomExpansionOut(name=name, rooms=list(rooms), base_room=rooms[0])


@router.get("/coverage", response_model=RoomCoverageOut)
def room_coverage(
    date: date,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> RoomCoverageOut:
    unassigned = unassigned_catalog_rooms(db, date)
    return RoomCoverageOut(date=date, all_assigned=not unassigned, unassigned=unassigned)


@router.delete("/{name}")
def delete_room(
    name: str,
    current: Profile = Depends(require_roles(ProfileRole.admin)),
    db: Session = Depends(get_db),
) -> dict:
    room = db.execute(select(Room).where(Room.name == name)).scalar_one_or_none()
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    db.delete(room)
    log_activity(db, actor=current, action="room.delete", entity_type="room", entity_id=room.id, details={"name": name})
    db.commit()
    return {"deleted": name}
