from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import time
from typing import Callable

from .config import DEFAULT_SERVICE_CONFIG, ServiceConfig
from .hours import serving_radius_km
from .models import GetRestaurantsRequest, GetRestaurantsResponse, Location, RestaurantView
from .repository import RestaurantRepository

logger = logging.getLogger(__name__)

StrategyFn = Callable[[Location, str, time, float], list[RestaurantView]]


class SearchAggregationError(RuntimeError):
    """A search strategy failed while running on the worker pool."""


def _shutdown_pool(executor: ThreadPoolExecutor, timeout_s: float) -> None:
    """Wait up to ``timeout_s`` for the pool to drain, then cancel whatever is still queued."""
    waiter = threading.Thread(target=executor.shutdown, kwargs={"wait": True}, daemon=True)
    waiter.start()
    waiter.join(timeout_s)
    if waiter.is_alive():
        logger.debug("Search pool still busy after %.1fs, cancelling pending work", timeout_s)
        executor.shutdown(wait=False, cancel_futures=True)


class RestaurantService:
    def __init__(
        self,
        repository: RestaurantRepository,
        config: ServiceConfig = DEFAULT_SERVICE_CONFIG,
    ) -> None:
        self._repository = repository
        self._config = config

    @property
    def repository(self) -> RestaurantRepository:
        return self._repository

    def find_restaurants(self, request: GetRestaurantsRequest, now: time) -> GetRestaurantsResponse:
        """Route to the search path when a term is given, otherwise list everything nearby."""
        if not request.search_for:
            return self.find_all_restaurants_close_by(request, now)
        if self._config.concurrent_search:
            return self.find_restaurants_by_search_query_mt(request, now)
        return self.find_restaurants_by_search_query(request, now)

    def find_all_restaurants_close_by(
        self, request: GetRestaurantsRequest, now: time
    ) -> GetRestaurantsResponse:
        logger.info("Finding restaurants close by for %s at %s", request, now)
        radius_km = serving_radius_km(now, self._config)
        restaurants = self._repository.find_all_restaurants_close_by(request.location, now, radius_km)
        logger.info("Found %d restaurants close by for %s at %s", len(restaurants), request, now)
        return GetRestaurantsResponse(restaurants=restaurants)

    def find_restaurants_by_search_query(
        self, request: GetRestaurantsRequest, now: time
    ) -> GetRestaurantsResponse:
        logger.info("Searching restaurants for %s at %s", request, now)
        if not request.search_for:
            logger.info("Empty search term for %s, nothing to search", request)
            return GetRestaurantsResponse()

        radius_km = serving_radius_km(now, self._config)
        restaurants: list[RestaurantView] = []
        for strategy in self._strategies():
            restaurants.extend(strategy(request.location, request.search_for, now, radius_km))

        logger.info("Found %d restaurants matching %r", len(restaurants), request.search_for)
        return GetRestaurantsResponse(restaurants=restaurants)

    def find_restaurants_by_search_query_mt(
        self, request: GetRestaurantsRequest, now: time
    ) -> GetRestaurantsResponse:
        """Run the four strategies on a worker pool and merge them in strategy order.

        Any strategy failure discards every result and raises
        ``SearchAggregationError``.
        """
        logger.info("Searching restaurants (multithreaded) for %s at %s", request, now)
        if not request.search_for:
            logger.info("Empty search term for %s, nothing to search", request)
            return GetRestaurantsResponse()

        radius_km = serving_radius_km(now, self._config)
        executor = ThreadPoolExecutor(
            max_workers=self._config.search_pool_size,
            thread_name_prefix="qeats-search",
        )
        try:
            futures = [
                executor.submit(strategy, request.location, request.search_for, now, radius_km)
                for strategy in self._strategies()
            ]
            restaurants: list[RestaurantView] = []
            for future in futures:
                try:
                    restaurants.extend(future.result())
                except Exception as exc:
                    raise SearchAggregationError(
                        f"Search for {request.search_for!r} failed: {exc}"
                    ) from exc
        finally:
            _shutdown_pool(executor, self._config.pool_shutdown_timeout_s)

        logger.info(
            "Found %d restaurants matching %r (multithreaded)", len(restaurants), request.search_for
        )
        return GetRestaurantsResponse(restaurants=restaurants)

    def _strategies(self) -> list[StrategyFn]:
        # Order here is the order of the merged result
        return [
            self._repository.find_restaurants_by_name,
            self._repository.find_restaurants_by_attributes,
            self._repository.find_restaurants_by_item_name,
            self._repository.find_restaurants_by_item_attributes,
        ]
