from __future__ import annotations

from datetime import datetime, time

from .cache import GeoCache, create_cache_backend
from .config import DEFAULT_CACHE_CONFIG, DEFAULT_SERVICE_CONFIG
from .data_store import get_data_store
from .repository import RestaurantRepository
from .service import RestaurantService

_service: RestaurantService | None = None


def get_restaurant_service() -> RestaurantService:
    """Return the shared service, wiring store and cache on first call."""
    global _service
    if _service is None:
        geo_cache = GeoCache(create_cache_backend(DEFAULT_CACHE_CONFIG), DEFAULT_CACHE_CONFIG)
        repository = RestaurantRepository(get_data_store(), geo_cache)
        _service = RestaurantService(repository, DEFAULT_SERVICE_CONFIG)
    return _service


def get_current_time() -> time:
    return datetime.now().time()
