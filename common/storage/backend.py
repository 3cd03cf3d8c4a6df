"""Abstract data source.

Every read and write against the external store goes through a
``DataSource``. Rows cross this boundary as plain dicts; turning them
into records is the fetcher's job.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

ENTITIES = (
    'users',
    'consultants',
    'channels',
    'clients',
    'client_contacts',
    'projects',
    'project_consultants',
    'demands',
    'time_entries',
    'tasks',
    'approvals',
    'payments',
)


class DataStoreError(Exception):
    """The store could not be reached or rejected the operation."""


class RecordNotFound(DataStoreError):
    def __init__(self, entity: str, record_id: str):
        super().__init__(f'{entity} {record_id} not found')
        self.entity = entity
        self.record_id = record_id


@dataclass(frozen=True)
class Range:
    """Inclusive bounds for a filter; either side may be open."""
    start: Optional[Any] = None
    end: Optional[Any] = None

    def __contains__(self, value) -> bool:
        if value is None:
            return False
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


Filters = Mapping[str, Any]


def matches_filters(row: Mapping[str, Any], filters: Optional[Filters]) -> bool:
    """Evaluate filters against a row.

    A filter value is either an equality value, a ``Range``, or a
    list/tuple/set meaning "any of".
    """
    for key, expected in (filters or {}).items():
        value = row.get(key)
        if isinstance(expected, Range):
            if isinstance(value, str) and isinstance(expected.start or expected.end, date):
                try:
                    value = date.fromisoformat(value[:10])
                except ValueError:
                    return False
            if value not in expected:
                return False
        elif isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def check_entity(entity: str) -> None:
    if entity not in ENTITIES:
        raise ValueError(f'Unknown entity: {entity}')


class DataSource(ABC):
    """Abstract base class for data sources."""

    name = 'abstract'

    @abstractmethod
    async def list(self, entity: str, filters: Optional[Filters] = None) -> List[Dict[str, Any]]:
        """Return all rows of an entity matching the filters."""

    @abstractmethod
    async def get(self, entity: str, record_id: str) -> Dict[str, Any]:
        """Return one row, raise RecordNotFound if missing."""

    @abstractmethod
    async def create(self, entity: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row, return it with its generated id."""

    @abstractmethod
    async def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Patch a row, return the updated row."""

    @abstractmethod
    async def delete(self, entity: str, record_id: str) -> None:
        """Delete a row, raise RecordNotFound if missing."""

    @abstractmethod
    async def update_many(
        self, entity: str, changes: Mapping[str, Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Apply ``{id: fields}`` atomically: every id must exist or
        nothing is written."""

    async def init(self) -> None:
        """Prepare the store (create tables, load files)."""

    async def health(self) -> Dict[str, Any]:
        return {'backend': self.name, 'ok': True}

    async def close(self) -> None:
        pass
