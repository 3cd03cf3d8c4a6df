"""Data store abstraction: live database, YAML fixture, read fallback."""

import logging

from .backend import ENTITIES, DataSource, DataStoreError, Range, RecordNotFound
from .fallback import FallbackDataSource
from .fixture import FixtureDataSource

logger = logging.getLogger(__name__)


def create_data_source(config) -> DataSource:
    """Factory: creates the configured data source.

    ``config`` is the ``data_source`` section of the service config.
    """
    backend = config.backend

    if backend == 'fixture':
        return FixtureDataSource.from_yaml(config.fixture_path)

    from .sql import LiveDataSource

    if backend == 'live':
        return LiveDataSource(config.database_url, echo=config.echo)

    # auto
    try:
        live = LiveDataSource(config.database_url, echo=config.echo)
    except Exception as e:
        logger.warning(f'Live store unavailable ({e}), using fixture data')
        return FixtureDataSource.from_yaml(config.fixture_path)
    if not config.fallback_to_fixture:
        return live
    return FallbackDataSource(live, FixtureDataSource.from_yaml(config.fixture_path))


__all__ = [
    'ENTITIES', 'DataSource', 'DataStoreError', 'Range', 'RecordNotFound',
    'FallbackDataSource', 'FixtureDataSource', 'create_data_source',
]
