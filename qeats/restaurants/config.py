from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ServiceConfig:
    peak_radius_km: float = 3.0
    normal_radius_km: float = 5.0
    # Inclusive (start_hour, end_hour) pairs
    peak_hours: tuple[tuple[int, int], ...] = ((8, 10), (13, 14), (19, 21))
    search_pool_size: int = 4
    pool_shutdown_timeout_s: float = 0.8
    concurrent_search: bool = _env_flag("QEATS_CONCURRENT_SEARCH", True)


@dataclass(frozen=True)
class CacheConfig:
    redis_url: str = os.getenv("REDIS_URL", "")
    entry_ttl_seconds: int = int(os.getenv("QEATS_CACHE_TTL_SECONDS", "3600"))
    geohash_precision: int = 7
    enabled: bool = _env_flag("QEATS_CACHE_ENABLED", True)
    socket_timeout: float = 0.5


@dataclass(frozen=True)
class DataConfig:
    data_dir: Path = Path(
        os.getenv(
            "QEATS_DATA_DIR",
            str(Path(__file__).resolve().parent.parent / "data" / "processed"),
        )
    )


DEFAULT_SERVICE_CONFIG = ServiceConfig()
DEFAULT_CACHE_CONFIG = CacheConfig()
DEFAULT_DATA_CONFIG = DataConfig()
