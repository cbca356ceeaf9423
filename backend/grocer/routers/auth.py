"""
# `grocer/routers/auth.py` — Registration & Sign-in

### `POST /auth/register`
Server-side sign-up: creates the Firebase Auth account (Admin SDK
`create_user`) and the `users` profile row in one call.
Body = profile fields (student / non-student) + `email` + `password`.
- Email already registered → `409`.
- If the profile write fails the freshly created account is deleted again.
- Response carries the new account's tokens, so the client is signed in right away.

### `POST /auth/login`
Proxies email + password to `accounts:signInWithPassword` and returns
`id_token`, `refresh_token`, `expires_in`, `user_id`.
Google sign-in happens on the client; those users call `POST /users/me/profile`.
"""
import logging

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from grocer.config import Settings, get_settings
from grocer.core.errors import GrocerError
from grocer.database import get_db
from grocer.integrations import identity
from grocer.schemas.user import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from grocer.services import profiles

logger = logging.getLogger("grocer.auth")

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest = Body(...),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        session = identity.sign_up(payload.email, payload.password, payload.username, settings=settings)
    except identity.IdentityError as exc:
        if exc.code == "EMAIL_EXISTS":
            raise GrocerError("An account with this email already exists.", status_code=409)
        raise GrocerError(f"Could not create account: {exc.code}", status_code=exc.status_code)

    try:
        profile = profiles.create_profile(db, session.user_id, payload, email=payload.email)
    except Exception:
        logger.exception("Profile write failed for new account %s; removing the account", session.user_id)
        try:
            identity.delete_account(session.user_id)
        except GrocerError as exc:
            logger.error("Could not remove orphaned account %s: %s", session.user_id, exc.message)
        raise

    return RegisterResponse(**session.model_dump(), user=profile)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, settings: Settings = Depends(get_settings)):
    """Email + password sign-in through Firebase; returns tokens."""
    try:
        session = identity.sign_in(payload.email, payload.password, settings=settings)
    except identity.IdentityError as exc:
        # never tell the caller which half of the credentials was wrong
        raise GrocerError("Invalid email or password.", status_code=401 if exc.status_code < 429 else exc.status_code)
    return LoginResponse(**session.model_dump())
