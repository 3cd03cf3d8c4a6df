"""Process wiring shared by the CLI and the portal."""
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from common.auth import Session, decode_session
from common.config import ServiceConfig, get_config
from common.models.base import UserRole
from common.storage import DataSource, create_data_source


def setup_logging(config: Optional[ServiceConfig] = None) -> None:
    config = config or get_config()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", config.logging.level),
        format=config.logging.format,
    )


@asynccontextmanager
async def open_data_source(config: Optional[ServiceConfig] = None) -> AsyncGenerator[DataSource, None]:
    """Create, initialise and finally close the configured data source."""
    config = config or get_config()
    source = create_data_source(config.data_source)
    await source.init()
    try:
        yield source
    finally:
        await source.close()


def cli_session(config: Optional[ServiceConfig] = None) -> Session:
    """Session for command line use.

    Uses BACKOFFICE_TOKEN when set; otherwise the operator acts as a
    local administrator.
    """
    config = config or get_config()
    token = os.environ.get("BACKOFFICE_TOKEN")
    if token:
        return decode_session(token, config.auth.secret_key, config.auth.algorithm)
    return Session(
        user_id="cli",
        name=os.environ.get("USER", "operator"),
        email="cli@localhost",
        role=UserRole.ADMIN,
    )
