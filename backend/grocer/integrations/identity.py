# grocer/integrations/identity.py
"""
Firebase Auth accounts for the storefront.

- Accounts are created and removed with the Firebase Admin SDK.
- Email + password sign-in goes through the Identity Toolkit REST endpoint
  (`accounts:signInWithPassword`); the Admin SDK cannot check passwords.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions
from pydantic import BaseModel

from grocer.config import Settings, get_firebase_app, get_settings
from grocer.core.errors import GrocerError

logger = logging.getLogger("grocer.identity")


class IdentityError(GrocerError):
    """Firebase rejected the call; `code` is its error code, e.g. EMAIL_EXISTS."""
    status_code = 400

    def __init__(self, code: str, status_code: Optional[int] = None):
        super().__init__(code, status_code=status_code)
        self.code = code


class IdentityUnavailable(GrocerError):
    status_code = 502

    def __init__(self, message: str = "Sign-in service unavailable"):
        super().__init__(message)


class AuthSession(BaseModel):
    id_token: str
    refresh_token: str
    expires_in: int
    user_id: str


_ERROR_STATUS = {
    "EMAIL_EXISTS": 409,
    "EMAIL_NOT_FOUND": 401,
    "INVALID_PASSWORD": 401,
    "INVALID_LOGIN_CREDENTIALS": 401,
    "USER_DISABLED": 403,
    "TOO_MANY_ATTEMPTS_TRY_LATER": 429,
}


# ---------- password sign-in (REST) ----------

def _sign_in_request(body: Dict[str, Any], settings: Settings) -> Dict[str, Any]:
    if not settings.firebase_web_api_key:
        raise GrocerError("Server misconfigured: missing FIREBASE_WEB_API_KEY", status_code=500)

    url = f"{settings.identity_toolkit_url.rstrip('/')}/accounts:signInWithPassword"
    try:
        with httpx.Client(timeout=10) as client:
            resp = client.post(url, params={"key": settings.firebase_web_api_key}, json=body)
    except httpx.HTTPError as exc:
        logger.warning("Password sign-in failed: %s", exc)
        raise IdentityUnavailable()

    try:
        data = resp.json()
    except ValueError:
        logger.warning("Password sign-in returned non-JSON (HTTP %s)", resp.status_code)
        raise IdentityUnavailable()

    if resp.status_code != 200:
        message = (data.get("error") or {}).get("message", "UNKNOWN_ERROR")
        # messages look like "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled"
        code = message.split(" : ")[0].strip()
        logger.info("Password sign-in rejected: %s", message)
        raise IdentityError(code, status_code=_ERROR_STATUS.get(code, 400))
    return data


def sign_in(email: str, password: str, settings: Optional[Settings] = None) -> AuthSession:
    settings = settings or get_settings()
    data = _sign_in_request({"email": email, "password": password, "returnSecureToken": True}, settings)
    return AuthSession(
        id_token=data["idToken"],
        refresh_token=data["refreshToken"],
        expires_in=int(data["expiresIn"]),
        user_id=data["localId"],
    )


# ---------- account management (Admin SDK) ----------

def create_account(email: str, password: str, display_name: Optional[str] = None) -> str:
    """Create an email + password account and return its UID."""
    try:
        user = fb_auth.create_user(email=email, password=password, display_name=display_name or None,
                                   app=get_firebase_app())
    except fb_auth.EmailAlreadyExistsError:
        raise IdentityError("EMAIL_EXISTS", status_code=409)
    except ValueError as exc:
        # rejected by the SDK before any call, e.g. a malformed email
        raise IdentityError(f"INVALID_ARGUMENT: {exc}", status_code=400)
    except fb_exceptions.FirebaseError as exc:
        logger.warning("Account creation failed for %s: %s", email, exc)
        raise IdentityUnavailable()
    logger.info("Account %s created for %s", user.uid, email)
    return user.uid


def delete_account(uid: str) -> None:
    try:
        fb_auth.delete_user(uid, app=get_firebase_app())
    except fb_auth.UserNotFoundError:
        logger.info("Account %s already gone", uid)
    except fb_exceptions.FirebaseError as exc:
        logger.warning("Could not delete account %s: %s", uid, exc)
        raise IdentityUnavailable()


def sign_up(email: str, password: str, display_name: Optional[str] = None,
            settings: Optional[Settings] = None) -> AuthSession:
    """Create the account, then sign it in so the caller gets tokens right away."""
    uid = create_account(email, password, display_name)
    try:
        return sign_in(email, password, settings=settings)
    except GrocerError:
        logger.error("New account %s could not sign in; removing it", uid)
        delete_account(uid)
        raise
