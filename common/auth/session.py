"""Authenticated session.

The role is resolved once, when the session is built from a signed
token, and every service receives the session explicitly.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from common.models.base import User, UserRole, as_enum

ADMIN_ROLES = (UserRole.ADMIN, UserRole.MASTER_ADMIN)


class AuthenticationError(Exception):
    """Missing, expired or tampered token."""


class PermissionDenied(Exception):
    """The session's role does not allow the operation."""


@dataclass(frozen=True)
class Session:
    user_id: str
    name: str
    email: str
    role: UserRole = UserRole.VIEW
    consultant_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_consultant(self) -> bool:
        return self.role == UserRole.CONSULTANT

    @classmethod
    def for_user(cls, user: User, consultant_id: Optional[str] = None) -> 'Session':
        return cls(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            consultant_id=consultant_id,
        )


def require_admin(session: Session) -> Session:
    if not session.is_admin:
        raise PermissionDenied(f'{session.email} ({session.role.value}) is not an administrator')
    return session


def create_access_token(
    session: Session,
    secret_key: str,
    algorithm: str = 'HS256',
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token carrying the session claims"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=480))
    claims = {
        'sub': session.user_id,
        'name': session.name,
        'email': session.email,
        'role': session.role.value,
        'consultant_id': session.consultant_id,
        'exp': expire,
    }
    return jwt.encode(claims, secret_key, algorithm=algorithm)


def decode_session(token: str, secret_key: str, algorithm: str = 'HS256') -> Session:
    """Verify a JWT and build the session from its claims"""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError as e:
        raise AuthenticationError('Invalid token') from e
    user_id = payload.get('sub')
    if not user_id:
        raise AuthenticationError('Invalid token')
    return Session(
        user_id=user_id,
        name=payload.get('name') or '',
        email=payload.get('email') or '',
        role=as_enum(UserRole, payload.get('role'), UserRole.VIEW),
        consultant_id=payload.get('consultant_id'),
    )
