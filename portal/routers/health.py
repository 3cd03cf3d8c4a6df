"""
Health Check Endpoint
"""

import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from common.storage import DataSource, DataStoreError

from ..deps import get_source

router = APIRouter()


@router.get("/health")
async def health_check(source: DataSource = Depends(get_source)):
    """Health check endpoint"""
    try:
        store = await source.health()
        store_status = "healthy" if store.get("ok") else "unhealthy"
    except DataStoreError as e:
        store, store_status = {"backend": source.name}, f"unhealthy: {e}"

    return {
        "status": "healthy" if store_status == "healthy" else "degraded",
        "data_source": store_status,
        "backend": store.get("backend"),
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
