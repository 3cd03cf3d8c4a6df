"""Read fallback between two data sources."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .backend import DataSource, DataStoreError, Filters, RecordNotFound

logger = logging.getLogger(__name__)


class FallbackDataSource(DataSource):
    """Serve reads from ``fallback`` when ``primary`` fails.

    Writes always go to the primary and never fall back, so a failed
    mutation is reported instead of landing in placeholder data.
    """

    name = 'fallback'

    def __init__(self, primary: DataSource, fallback: DataSource):
        self.primary = primary
        self.fallback = fallback

    async def list(self, entity: str, filters: Optional[Filters] = None) -> List[Dict[str, Any]]:
        try:
            return await self.primary.list(entity, filters)
        except DataStoreError as e:
            logger.warning(f'{self.primary.name} unavailable ({e}), listing {entity} from {self.fallback.name}')
            return await self.fallback.list(entity, filters)

    async def get(self, entity: str, record_id: str) -> Dict[str, Any]:
        try:
            return await self.primary.get(entity, record_id)
        except RecordNotFound:
            raise
        except DataStoreError as e:
            logger.warning(f'{self.primary.name} unavailable ({e}), reading {entity} {record_id} from {self.fallback.name}')
            return await self.fallback.get(entity, record_id)

    async def create(self, entity: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.primary.create(entity, fields)

    async def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.primary.update(entity, record_id, fields)

    async def update_many(
        self, entity: str, changes: Mapping[str, Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        return await self.primary.update_many(entity, changes)

    async def delete(self, entity: str, record_id: str) -> None:
        await self.primary.delete(entity, record_id)

    async def init(self) -> None:
        await self.fallback.init()
        try:
            await self.primary.init()
        except DataStoreError as e:
            logger.warning(f'{self.primary.name} init failed ({e}), reads will use {self.fallback.name}')

    async def health(self) -> Dict[str, Any]:
        status = await self.primary.health()
        return {**status, 'fallback': self.fallback.name}

    async def close(self) -> None:
        await self.primary.close()
        await self.fallback.close()
