from collections.abc import Callable, Generator, Iterable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from roomdesk.core.security import decode_token
from roomdesk.db.session import SessionLocal
from roomdesk.models.profile import Profile, ProfileRole

bearer = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def profile_from_token(db: Session, token: str) -> Profile | None:
    try:
        subject = decode_token(token).get("sub")
    except JWTError:
        return None
    if not subject:
        return None
    profile = db.get(Profile, str(subject))
    if profile is None or not profile.is_active:
        return None
    return profile


def get_current_profile(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    db: Session = Depends(get_db),
) -> Profile:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        subject = decode_token(credentials.credentials).get("sub")
    except JWTError as exc:
        raise unauthorized from exc
    if not subject:
        raise unauthorized

    profile = db.get(Profile, str(subject))
    if profile is None:
        raise unauthorized
    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Profile is inactive")
    return profile


def require_roles(*roles: ProfileRole) -> Callable[[Profile], Profile]:
    allowed: Iterable[ProfileRole] = set(roles)

    def role_checker(current: Profile = Depends(get_current_profile)) -> Profile:
        if current.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current

    return role_checker


require_scheduler = require_roles(ProfileRole.admin, ProfileRole.scheduler)
