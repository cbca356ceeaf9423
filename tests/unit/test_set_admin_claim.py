from unittest.mock import Mock

import pytest
from firebase_admin import auth as fb_auth

import set_admin_claim as script

FIREBASE_APP = object()


@pytest.fixture
def users(monkeypatch):
    """Firebase Admin user calls used by the script, replaced with mocks."""
    fake = Mock()
    for name in ("get_user_by_email", "set_custom_user_claims", "revoke_refresh_tokens"):
        monkeypatch.setattr(script.auth, name, getattr(fake, name))
    return fake


class TestSetAdminClaim:
    def test_grants_and_keeps_other_claims(self, users):
        users.get_user_by_email.return_value = Mock(uid="uid-1", custom_claims={"tier": "gold"})

        assert script.set_admin_claim("ops@example.com", app=FIREBASE_APP) is True

        users.get_user_by_email.assert_called_once_with("ops@example.com", app=FIREBASE_APP)
        users.set_custom_user_claims.assert_called_once_with(
            "uid-1", {"tier": "gold", "admin": True}, app=FIREBASE_APP
        )
        users.revoke_refresh_tokens.assert_not_called()

    def test_revoke_clears_claim_and_sessions(self, users):
        users.get_user_by_email.return_value = Mock(uid="uid-1", custom_claims={"admin": True})

        assert script.set_admin_claim("ops@example.com", admin=False, app=FIREBASE_APP)

        users.set_custom_user_claims.assert_called_once_with("uid-1", None, app=FIREBASE_APP)
        users.revoke_refresh_tokens.assert_called_once_with("uid-1", app=FIREBASE_APP)

    def test_user_without_claims(self, users):
        users.get_user_by_email.return_value = Mock(uid="uid-2", custom_claims=None)

        assert script.set_admin_claim("new@example.com", app=FIREBASE_APP)

        users.set_custom_user_claims.assert_called_once_with("uid-2", {"admin": True}, app=FIREBASE_APP)

    def test_unknown_user(self, users):
        users.get_user_by_email.side_effect = fb_auth.UserNotFoundError("No user record found")

        assert script.set_admin_claim("nobody@example.com", app=FIREBASE_APP) is False
        users.set_custom_user_claims.assert_not_called()
