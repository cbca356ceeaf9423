# grocer/core/auth.py
"""
Firebase ID token verification and role dependencies.

Clients sign in with Firebase Auth (email/password or Google) and send
`Authorization: Bearer <id_token>`. Tokens are verified with the Firebase Admin SDK,
including the revocation check, so revoking a user's refresh tokens locks them out
right away. The `admin` custom claim grants the admin role (see backend/set_admin_claim.py).
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions

from grocer.config import get_firebase_app, get_settings
from grocer.schemas.principal import Principal

logger = logging.getLogger("grocer.auth")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail,
                         headers={"WWW-Authenticate": "Bearer"})


def _extract_bearer_token(request: Request) -> Optional[str]:
    """
    Read the token from `Authorization: Bearer <id_token>`.
    Returns None when the header is missing or malformed.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_id_token(id_token: str) -> dict:
    """Verify a Firebase ID token (signature, audience, expiry, revocation); 401 on any failure."""
    if not get_settings().firebase_project_id:
        logger.error("FIREBASE_PROJECT_ID is not set; cannot verify ID tokens")
        raise HTTPException(status_code=500, detail="Server misconfigured: missing FIREBASE_PROJECT_ID")
    try:
        return fb_auth.verify_id_token(id_token, app=get_firebase_app(), check_revoked=True)
    except fb_auth.ExpiredIdTokenError:
        raise _unauthorized("Token expired")
    except fb_auth.RevokedIdTokenError:
        logger.info("Rejected revoked ID token")
        raise _unauthorized("Token revoked")
    except fb_auth.UserDisabledError:
        raise _unauthorized("Account disabled")
    except (fb_auth.InvalidIdTokenError, ValueError) as exc:
        logger.info("Rejected ID token: %s", exc)
        raise _unauthorized("Invalid authentication token")
    except fb_auth.CertificateFetchError as exc:
        logger.warning("Could not fetch token certificates: %s", exc)
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    except fb_exceptions.FirebaseError as exc:
        # revocation lookup failed upstream
        logger.warning("Token check failed: %s", exc)
        raise HTTPException(status_code=503, detail="Authentication service unavailable")


def token_to_principal(decoded: dict) -> Principal:
    """
    Build a Principal from verified claims.
    - anonymous provider -> role='guest'
    - custom claim admin=True -> role='admin'
    - everyone else -> role='user'
    """
    uid = decoded.get("user_id") or decoded.get("sub") or decoded.get("uid")
    if not uid:
        raise HTTPException(status_code=401, detail="Token missing uid.")

    provider = (decoded.get("firebase") or {}).get("sign_in_provider")
    if provider == "anonymous":
        role = "guest"
    elif decoded.get("admin") is True:
        role = "admin"
    else:
        role = "user"

    return Principal(
        uid=uid,
        role=role,
        email=decoded.get("email"),
        display_name=decoded.get("name"),
    )


# --------- FastAPI Dependencies --------- #

def get_principal(request: Request) -> Principal:
    """Token required: guest / user / admin."""
    token = _extract_bearer_token(request)
    if not token:
        raise _unauthorized("Missing Authorization header.")
    return token_to_principal(_decode_id_token(token))


def require_non_guest(principal: Principal = Depends(get_principal)) -> Principal:
    """Blocks anonymous sessions (checkout, profile)."""
    if principal.is_guest:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Guest users are not allowed for this action."
        )
    return principal


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Admins only."""
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privilege required."
        )
    return principal
