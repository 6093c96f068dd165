from __future__ import annotations

from datetime import time
from typing import Iterable

from .cache import GeoCache
from .data_store import RestaurantDataStore
from .geo import is_eligible
from .models import ItemRecord, Location, RestaurantRecord, RestaurantView, record_to_view


class RestaurantRepository:
    """Candidate lookups against the data store, each narrowed to restaurants
    that are open and within the serving radius."""

    def __init__(self, store: RestaurantDataStore, geo_cache: GeoCache | None = None) -> None:
        self._store = store
        self._geo_cache = geo_cache

    @property
    def geo_cache(self) -> GeoCache | None:
        return self._geo_cache

    def find_all_restaurants_close_by(
        self, location: Location, now: time, radius_km: float
    ) -> list[RestaurantView]:
        if self._geo_cache is None:
            return self._scan_close_by(location, now, radius_km)
        return self._geo_cache.lookup(location, now, radius_km, self._scan_close_by)

    def find_restaurants_by_name(
        self, location: Location, search_for: str, now: time, radius_km: float
    ) -> list[RestaurantView]:
        candidates = self._store.find_restaurants_by_name(search_for)
        return _close_by_and_open(candidates, location, now, radius_km)

    def find_restaurants_by_attributes(
        self, location: Location, search_for: str, now: time, radius_km: float
    ) -> list[RestaurantView]:
        candidates = self._store.find_restaurants_by_attributes(search_for)
        return _close_by_and_open(candidates, location, now, radius_km)

    def find_restaurants_by_item_name(
        self, location: Location, search_for: str, now: time, radius_km: float
    ) -> list[RestaurantView]:
        items = self._store.find_items_by_name(search_for)
        candidates = self._restaurants_serving(items)
        return _close_by_and_open(candidates, location, now, radius_km)

    def find_restaurants_by_item_attributes(
        self, location: Location, search_for: str, now: time, radius_km: float
    ) -> list[RestaurantView]:
        items = self._store.find_items_by_attributes(search_for)
        candidates = self._restaurants_serving(items)
        return _close_by_and_open(candidates, location, now, radius_km)

    def _scan_close_by(self, location: Location, now: time, radius_km: float) -> list[RestaurantView]:
        return _close_by_and_open(self._store.find_all(), location, now, radius_km)

    def _restaurants_serving(self, items: list[ItemRecord]) -> list[RestaurantRecord]:
        if not items:
            return []
        menus = self._store.find_menus_by_item_ids(item.item_id for item in items)
        if not menus:
            return []
        return self._store.find_restaurants_by_ids({menu.restaurant_id for menu in menus})


def _close_by_and_open(
    records: Iterable[RestaurantRecord],
    location: Location,
    now: time,
    radius_km: float,
) -> list[RestaurantView]:
    return [
        record_to_view(record)
        for record in records
        if is_eligible(record, now, location, radius_km)
    ]
