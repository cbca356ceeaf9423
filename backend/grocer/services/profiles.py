# grocer/services/profiles.py
from __future__ import annotations

import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from grocer.core.errors import GrocerError
from grocer.model.user import User
from grocer.schemas.user import (
    DEFAULT_CITY,
    NonStudentProfileCreate,
    StudentProfileCreate,
    UserProfile,
)

logger = logging.getLogger("grocer.profiles")


class ProfileExists(GrocerError):
    status_code = 409

    def __init__(self, uid: str):
        super().__init__("Profile already exists for this account.")
        self.uid = uid


def row_to_profile(row: User) -> UserProfile:
    user_type = row.user_type or "student"
    city = row.city
    if user_type == "non-student" and not city:
        city = DEFAULT_CITY
    return UserProfile(
        id=row.id,
        username=row.username or f"{row.first_name or ''} {row.last_name or ''}".strip(),
        firstName=row.first_name or "",
        lastName=row.last_name or "",
        email=row.email or "",
        phoneNumber=row.phone_number or "",
        userType=user_type,
        university=row.university,
        hostel=row.hostel,
        block=row.block,
        room=row.room,
        address=row.address,
        landmark=row.landmark,
        township=row.township,
        city=city,
        latitude=row.latitude,
        longitude=row.longitude,
        createdAt=row.created_at,
    )


def create_profile(
    db: Session,
    uid: str,
    payload: Union[StudentProfileCreate, NonStudentProfileCreate],
    *,
    email: Optional[str] = None,
) -> UserProfile:
    if db.get(User, uid) is not None:
        raise ProfileExists(uid)

    # registration payloads also carry a password; only profile fields are read here
    row = User(
        id=uid,
        username=payload.username,
        first_name=payload.firstName,
        last_name=payload.lastName,
        email=str(payload.email or email or ""),
        phone_number=payload.phoneNumber,
        user_type=payload.userType,
        latitude=payload.latitude,
        longitude=payload.longitude,
    )
    if isinstance(payload, StudentProfileCreate):
        row.university = payload.university
        row.hostel = payload.hostel
        row.block = payload.block
        row.room = payload.room
    else:
        row.address = payload.address
        row.landmark = payload.landmark
        row.township = payload.township
        row.city = payload.city

    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Profile created for %s (%s)", uid, payload.userType)
    return row_to_profile(row)


def get_profile(db: Session, uid: str) -> Optional[UserProfile]:
    row = db.get(User, uid)
    if row is None:
        return None
    return row_to_profile(row)


def list_profiles(db: Session) -> List[UserProfile]:
    return [row_to_profile(u) for u in db.query(User).order_by(User.created_at).all()]
