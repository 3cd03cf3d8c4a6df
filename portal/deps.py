"""
Request dependencies: data source and bearer-token session
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from common.auth import AuthenticationError, Session, decode_session, require_admin
from common.config import ServiceConfig
from common.storage import DataSource

security = HTTPBearer()


def get_config(request: Request) -> ServiceConfig:
    return request.app.state.config


def get_source(request: Request) -> DataSource:
    return request.app.state.source


async def get_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    config: ServiceConfig = Depends(get_config),
) -> Session:
    """Build the session from the bearer JWT"""
    try:
        return decode_session(credentials.credentials, config.auth.secret_key, config.auth.algorithm)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_admin_session(session: Session = Depends(get_session)) -> Session:
    """Require admin role"""
    return require_admin(session)
