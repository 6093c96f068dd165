from __future__ import annotations

from datetime import time
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query

from .restaurants.dependencies import get_current_time, get_restaurant_service
from .restaurants.models import (
    CacheStatsResponse,
    GetRestaurantsRequest,
    GetRestaurantsResponse,
)
from .restaurants.service import RestaurantService, SearchAggregationError

app = FastAPI(title="QEats Restaurant API", version="1.0.0")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get(
    "/qeats/v1/restaurants",
    response_model=GetRestaurantsResponse,
    response_model_by_alias=True,
)
def restaurants(
    params: Annotated[GetRestaurantsRequest, Query()],
    service: RestaurantService = Depends(get_restaurant_service),
    now: time = Depends(get_current_time),
) -> GetRestaurantsResponse:
    try:
        return service.find_restaurants(params, now)
    except SearchAggregationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/qeats/v1/cache/stats", response_model=CacheStatsResponse)
def cache_stats(service: RestaurantService = Depends(get_restaurant_service)) -> dict:
    geo_cache = service.repository.geo_cache
    if geo_cache is None:
        return {
            "backend": "none",
            "available": False,
            "hits": 0,
            "misses": 0,
            "bypasses": 0,
            "hit_rate": 0.0,
        }
    return geo_cache.stats()
