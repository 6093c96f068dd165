from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from datetime import time as time_of_day
from typing import Callable, ContextManager, Iterator, Protocol

import pygeohash
import redis
from pydantic import TypeAdapter

from .config import DEFAULT_CACHE_CONFIG, CacheConfig
from .models import Location, RestaurantView

logger = logging.getLogger(__name__)

_RESTAURANT_LIST = TypeAdapter(list[RestaurantView])

ScanFn = Callable[[Location, time_of_day, float], list[RestaurantView]]


class CacheSession(Protocol):
    def get(self, key: str) -> str | None: ...

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None: ...


class CacheBackend(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def session(self) -> ContextManager[CacheSession]: ...


# ── Backends ─────────────────────────────────────────────────────────────


class InMemoryCacheBackend:
    """Process-local key/value store with per-entry expiry."""

    name = "memory"

    def __init__(self) -> None:
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return True

    @contextmanager
    def session(self) -> Iterator[InMemoryCacheBackend]:
        yield self

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            now = time.monotonic()
            self._purge_expired(now)
            self._entries[key] = (now + ttl_seconds, value)

    def _purge_expired(self, now: float) -> None:
        # Caller holds the lock
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class _RedisSession:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.setex(key, ttl_seconds, value)


class RedisCacheBackend:
    name = "redis"

    def __init__(self, url: str, socket_timeout: float = 0.5) -> None:
        self._pool = redis.ConnectionPool.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    def is_available(self) -> bool:
        client = redis.Redis(connection_pool=self._pool)
        try:
            return bool(client.ping())
        except redis.RedisError:
            logger.debug("Redis ping failed, cache unavailable", exc_info=True)
            return False
        finally:
            client.close()

    @contextmanager
    def session(self) -> Iterator[_RedisSession]:
        client = redis.Redis(connection_pool=self._pool)
        try:
            yield _RedisSession(client)
        finally:
            client.close()

    def close(self) -> None:
        self._pool.disconnect()


def create_cache_backend(config: CacheConfig = DEFAULT_CACHE_CONFIG) -> CacheBackend:
    if config.redis_url:
        return RedisCacheBackend(config.redis_url, socket_timeout=config.socket_timeout)
    return InMemoryCacheBackend()


# ── Geohash cache-aside layer ────────────────────────────────────────────


def geohash_key(location: Location, precision: int = 7) -> str:
    return pygeohash.encode(location.latitude, location.longitude, precision=precision)


def serialize_restaurants(restaurants: list[RestaurantView]) -> str:
    return _RESTAURANT_LIST.dump_json(restaurants, by_alias=True).decode()


def deserialize_restaurants(payload: str) -> list[RestaurantView]:
    return _RESTAURANT_LIST.validate_json(payload)


class GeoCache:
    """Caches the full "open and nearby" list per geohash cell of the query.

    Entries are overwritten whole on a miss and only ever expire through
    their TTL. A hit is returned as stored, without re-checking hours or
    distance, and regardless of the radius the caller asked for.
    """

    def __init__(
        self,
        backend: CacheBackend | None,
        config: CacheConfig = DEFAULT_CACHE_CONFIG,
    ) -> None:
        self._backend = backend
        self._config = config
        self._hits = 0
        self._misses = 0
        self._bypasses = 0
        self._stats_lock = threading.Lock()

    def is_available(self) -> bool:
        if not self._config.enabled or self._backend is None:
            return False
        return self._backend.is_available()

    def key_for(self, location: Location) -> str:
        return geohash_key(location, self._config.geohash_precision)

    def lookup(
        self,
        query_location: Location,
        now: time_of_day,
        radius_km: float,
        scan: ScanFn,
    ) -> list[RestaurantView]:
        if not self.is_available():
            with self._stats_lock:
                self._bypasses += 1
            return scan(query_location, now, radius_km)

        key = self.key_for(query_location)
        with self._backend.session() as session:
            cached = self._read(session, key)
            if cached is not None:
                with self._stats_lock:
                    self._hits += 1
                logger.debug("Cache hit for cell %s (%d restaurants)", key, len(cached))
                return cached

            with self._stats_lock:
                self._misses += 1
            logger.debug("Cache miss for cell %s", key)
            restaurants = scan(query_location, now, radius_km)
            self._write(session, key, restaurants)
        return restaurants

    def _read(self, session: CacheSession, key: str) -> list[RestaurantView] | None:
        try:
            payload = session.get(key)
            if payload is None:
                return None
            return deserialize_restaurants(payload)
        except Exception:
            logger.warning("Could not read cache entry %s, recomputing", key, exc_info=True)
            return None

    def _write(self, session: CacheSession, key: str, restaurants: list[RestaurantView]) -> None:
        try:
            session.set_with_expiry(key, serialize_restaurants(restaurants), self._config.entry_ttl_seconds)
        except Exception:
            logger.warning("Could not populate cache entry %s", key, exc_info=True)

    def stats(self) -> dict:
        with self._stats_lock:
            hits, misses, bypasses = self._hits, self._misses, self._bypasses
        lookups = hits + misses
        return {
            "backend": self._backend.name if self._backend is not None else "none",
            "available": self.is_available(),
            "hits": hits,
            "misses": misses,
            "bypasses": bypasses,
            "hit_rate": round(hits / lookups * 100, 1) if lookups > 0 else 0.0,
        }

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._hits = 0
            self._misses = 0
            self._bypasses = 0
