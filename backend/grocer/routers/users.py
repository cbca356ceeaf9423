"""
# `grocer/routers/users.py` — Profile Endpoints

All endpoints require a Firebase ID token.

### `POST /users/me/profile`
Completes the profile of a signed-in account (e.g. after Google sign-in).
Body is discriminated by `userType` (`student` | `non-student`).
`409` if the profile already exists.

### `GET /users/me`
The caller's profile; `404` until the profile is completed.

### `GET /admin/users/`
Every registered profile (admin dashboard).
"""
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, status

from grocer.database import get_db
from grocer.core.auth import require_admin, require_non_guest
from grocer.schemas.principal import Principal
from grocer.schemas.user import ProfileCreate, UserProfile
from grocer.services import profiles

router = APIRouter(prefix="/users", tags=["Users"])
admin_router = APIRouter(prefix="/users", tags=["Admin Users"], dependencies=[Depends(require_admin)])


@router.post("/me/profile", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
def complete_profile(
    payload: ProfileCreate = Body(...),
    principal: Principal = Depends(require_non_guest),
    db=Depends(get_db),
):
    return profiles.create_profile(db, principal.uid, payload, email=principal.email)


@router.get("/me", response_model=UserProfile)
def get_my_profile(principal: Principal = Depends(require_non_guest), db=Depends(get_db)):
    profile = profiles.get_profile(db, principal.uid)
    if profile is None:
        raise HTTPException(status_code=404, detail="User profile not found")
    return profile


@admin_router.get("/", response_model=List[UserProfile])
def list_users(db=Depends(get_db)):
    return profiles.list_profiles(db)
