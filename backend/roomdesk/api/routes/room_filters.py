from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db
from roomdesk.models.profile import Profile, ProfileRole
from roomdesk.models.room_filter import RoomFilter
from roomdesk.schemas.room_filter import RoomFilterCreate, RoomFilterOut
from roomdesk.services.audit import log_activity
from roomdesk.services.room_filters import create_filter, delete_filter, load_filter, visible_filters

router = APIRouter()


@router.get("", response_model=list[RoomFilterOut])
def list_room_filters(
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[RoomFilterOut]:
    return visible_filters(db, current)


@router.post("", response_model=RoomFilterOut, status_code=status.HTTP_201_CREATED)
def save_room_filter(
    payload: RoomFilterCreate,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> RoomFilterOut:
    if payload.is_default and current.role != ProfileRole.admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can save shared filters")
    owner_id = None if payload.is_default else current.id
    query = select(RoomFilter).where(RoomFilter.name == payload.name)
    query = query.where(RoomFilter.owner_id.is_(None) if owner_id is None else RoomFilter.owner_id == owner_id)
    if db.execute(query).scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Filter name already exists")

    log_activity(
        db,
        actor=current,
        action="room_filter.create",
        entity_type="room_filter",
        details={"name": payload.name, "is_default": payload.is_default},
    )
    return create_filter(
        db,
        profile=current,
        name=payload.name,
        display_rooms=payload.display_rooms,
        notify_rooms=payload.notify_rooms,
        is_default=payload.is_default,
    )


@router.post("/{filter_id}/load", response_model=RoomFilterOut)
def load_room_filter(
    filter_id: int,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> RoomFilterOut:
    return load_filter(db, profile=current, filter_id=filter_id)


@router.delete("/{filter_id}")
def delete_room_filter(
    filter_id: int,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> dict:
    log_activity(
        db,
        actor=current,
        action="room_filter.delete",
        entity_type="room_filter",
        entity_id=str(filter_id),
    )
    delete_filter(db, profile=current, filter_id=filter_id)
    return {"deleted": filter_id}
