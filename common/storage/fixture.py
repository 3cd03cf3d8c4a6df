"""In-memory data source loaded from a YAML fixture.

Used for development, demos and tests, and as the read fallback when the
live store is unreachable. Writes only live as long as the process.
"""

import copy
import logging
import uuid
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .backend import ENTITIES, DataSource, DataStoreError, Filters, RecordNotFound, check_entity, matches_filters

logger = logging.getLogger(__name__)


def _plain(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v.value if isinstance(v, Enum) else v for k, v in fields.items()}


class FixtureDataSource(DataSource):
    """DataSource over in-memory collections."""

    name = 'fixture'

    def __init__(self, data: Optional[Mapping[str, List[Dict[str, Any]]]] = None):
        self._data: Dict[str, List[Dict[str, Any]]] = {entity: [] for entity in ENTITIES}
        for entity, rows in (data or {}).items():
            check_entity(entity)
            self._data[entity] = [dict(row) for row in rows or []]

    @classmethod
    def from_yaml(cls, path: str) -> 'FixtureDataSource':
        fixture = Path(path)
        try:
            with open(fixture) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DataStoreError(f'Cannot load fixture {fixture}: {e}') from e
        logger.info(f'Loaded fixture {fixture.name} ({sum(len(v or []) for v in data.values())} rows)')
        return cls(data)

    def _find(self, entity: str, record_id: str) -> Dict[str, Any]:
        for row in self._data[entity]:
            if str(row.get('id')) == str(record_id):
                return row
        raise RecordNotFound(entity, record_id)

    async def list(self, entity: str, filters: Optional[Filters] = None) -> List[Dict[str, Any]]:
        check_entity(entity)
        return [copy.deepcopy(row) for row in self._data[entity] if matches_filters(row, filters)]

    async def get(self, entity: str, record_id: str) -> Dict[str, Any]:
        check_entity(entity)
        return copy.deepcopy(self._find(entity, record_id))

    async def create(self, entity: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        check_entity(entity)
        row = _plain(fields)
        row.setdefault('id', str(uuid.uuid4()))
        self._data[entity].append(row)
        logger.info(f'Created {entity} {row["id"]}')
        return copy.deepcopy(row)

    async def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return (await self.update_many(entity, {record_id: fields}))[0]

    async def update_many(
        self, entity: str, changes: Mapping[str, Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        check_entity(entity)
        # Resolve every row before touching any of them
        rows = [(self._find(entity, record_id), fields) for record_id, fields in changes.items()]
        for row, fields in rows:
            row.update(_plain(fields))
        logger.info(f'Updated {len(rows)} {entity} row(s)')
        return [copy.deepcopy(row) for row, _ in rows]

    async def delete(self, entity: str, record_id: str) -> None:
        check_entity(entity)
        row = self._find(entity, record_id)
        self._data[entity].remove(row)
        logger.info(f'Deleted {entity} {record_id}')
