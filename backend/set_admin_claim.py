#!/usr/bin/env python3
"""
Grants (or revokes) the `admin` custom claim on a Firebase Auth user with the Firebase Admin SDK.
The admin dashboard endpoints check this claim.

Needs FIREBASE_PROJECT_ID and a service account key in GOOGLE_APPLICATION_CREDENTIALS
(or application default credentials).
"""

import logging
import sys
from typing import Optional

import firebase_admin
from firebase_admin import auth

from grocer.config import get_firebase_app

logger = logging.getLogger("grocer.scripts.set_admin_claim")


def set_admin_claim(user_email: str, admin: bool = True, app: Optional[firebase_admin.App] = None) -> bool:
    """Adds (or removes) the admin custom claim for `user_email`; other claims are kept."""
    app = app or get_firebase_app()
    try:
        user = auth.get_user_by_email(user_email, app=app)
    except auth.UserNotFoundError:
        logger.error("User not found: %s", user_email)
        return False

    claims = dict(user.custom_claims or {})
    if admin:
        claims["admin"] = True
    else:
        claims.pop("admin", None)

    auth.set_custom_user_claims(user.uid, claims or None, app=app)
    if not admin:
        # outstanding ID tokens still carry the claim; revoked tokens fail verification
        auth.revoke_refresh_tokens(user.uid, app=app)
    logger.info("Custom claims for %s (%s): %s", user_email, user.uid, claims)
    return True


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if len(args) != 1:
        print("Usage: python set_admin_claim.py <user_email> [--revoke]")
        sys.exit(1)

    if not set_admin_claim(args[0], admin="--revoke" not in sys.argv):
        sys.exit(1)
    print("The user will need to sign out and sign in again for the change to take effect.")
