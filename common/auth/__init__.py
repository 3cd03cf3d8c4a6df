"""Session authentication and role checks."""

from .session import (
    AuthenticationError,
    PermissionDenied,
    Session,
    create_access_token,
    decode_session,
    require_admin,
)

__all__ = [
    'AuthenticationError', 'PermissionDenied', 'Session',
    'create_access_token', 'decode_session', 'require_admin',
]
