from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from roomdesk.api.deps import get_current_profile, get_db, require_scheduler
from roomdesk.models.faculty import Faculty
from roomdesk.models.profile import Profile
from roomdesk.schemas.faculty import FacultyCreate, FacultyOut, FacultySetupUpdate
from roomdesk.services.audit import log_activity

router = APIRouter()


def faculty_by_calendar_names(db: Session, names: list[str]) -> list[Faculty]:
    wanted = sorted({" ".join(name.split()) for name in names if name and name.strip()})
    if not wanted:
        return []
    return list(
        db.execute(
            select(Faculty).where(Faculty.calendar_name.in_(wanted)).order_by(Faculty.calendar_name.asc())
        ).scalars()
    )


@router.get("", response_model=list[FacultyOut])
def list_faculty(
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[FacultyOut]:
    return list(
        db.execute(select(Faculty).order_by(Faculty.directory_name.asc(), Faculty.calendar_name.asc())).scalars()
    )


@router.get("/lookup", response_model=list[FacultyOut])
def lookup_faculty(
    names: list[str] = Query(),
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> list[FacultyOut]:
    return faculty_by_calendar_names(db, names)


@router.get("/{faculty_id}", response_model=FacultyOut)
def read_faculty(
    faculty_id: int,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> FacultyOut:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty member not found")
    return faculty


@router.post("", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(
    payload: FacultyCreate,
    current: Profile = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> FacultyOut:
    existing = db.execute(select(Faculty).where(Faculty.calendar_name == payload.calendar_name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty member already exists")
    faculty = Faculty(**payload.model_dump())
    db.add(faculty)
    log_activity(
        db,
        actor=current,
        action="faculty.create",
        entity_type="faculty",
        details={"calendar_name": payload.calendar_name},
    )
    db.commit()
    db.refresh(faculty)
    return faculty


@router.patch("/{faculty_id}/setup", response_model=FacultyOut)
def update_faculty_setup(
    faculty_id: int,
    payload: FacultySetupUpdate,
    current: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
) -> FacultyOut:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty member not found")

    data = payload.model_dump(exclude_unset=True)
    if "uses_mic" in data and data["uses_mic"] is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="uses_mic cannot be null")
    for key, value in data.items():
        setattr(faculty, key, value)
    faculty.setup_updated_at = datetime.now(timezone.utc)
    faculty.setup_updated_by = current.id
    log_activity(
        db,
        actor=current,
        action="faculty.setup.update",
        entity_type="faculty",
        entity_id=str(faculty.id),
        details={"fields": sorted(data)},
    )
    db.commit()
    db.refresh(faculty)
    return faculty
