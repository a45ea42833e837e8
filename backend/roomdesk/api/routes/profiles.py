from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db
from roomdesk.models.profile import Profile
from roomdesk.schemas.profile import ProfileOut

router = APIRouter()


@router.get("", response_model=list[ProfileOut])
def list_profiles(
    include_inactive: bool = False,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[ProfileOut]:
    query = select(Profile).order_by(Profile.name.asc())
    if not include_inactive:
        query = query.where(Profile.is_active.is_(True))
    return list(db.execute(query).scalars())


@router.get("/me", response_model=ProfileOut)
def read_me(current: Profile = Depends(get_current_profile)) -> ProfileOut:
    return current


@router.get("/{profile_id}", response_model=ProfileOut)
def read_profile(
    profile_id: str,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> ProfileOut:
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile
