"""Tests for the authenticated session and its tokens."""
from datetime import timedelta

import pytest

from common.auth import (
    AuthenticationError,
    PermissionDenied,
    Session,
    create_access_token,
    decode_session,
    require_admin,
)
from common.models.base import User, UserRole

SECRET = "test-secret"


class TestRoles:

    @pytest.mark.parametrize("role, admin", [
        (UserRole.VIEW, False),
        (UserRole.CONSULTANT, False),
        (UserRole.ADMIN, True),
        (UserRole.MASTER_ADMIN, True),
    ])
    def test_is_admin(self, role, admin):
        assert Session("u-1", "U", "u@x", role).is_admin is admin

    def test_require_admin(self, admin_session, bruno_session):
        assert require_admin(admin_session) is admin_session
        with pytest.raises(PermissionDenied):
            require_admin(bruno_session)

    def test_for_user(self):
        user = User(id="u-bruno", name="Bruno", email="bruno@x", role=UserRole.CONSULTANT)
        session = Session.for_user(user, "c-bruno")
        assert session.is_consultant
        assert session.consultant_id == "c-bruno"


class TestTokens:

    def test_roundtrip_keeps_claims(self, bruno_session):
        token = create_access_token(bruno_session, SECRET)
        assert decode_session(token, SECRET) == bruno_session

    def test_wrong_secret(self, admin_session):
        token = create_access_token(admin_session, SECRET)
        with pytest.raises(AuthenticationError):
            decode_session(token, "other-secret")

    def test_expired(self, admin_session):
        token = create_access_token(admin_session, SECRET, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError):
            decode_session(token, SECRET)

    def test_garbage(self):
        with pytest.raises(AuthenticationError):
            decode_session("not-a-token", SECRET)
