from __future__ import annotations

from datetime import time

from .config import DEFAULT_SERVICE_CONFIG, ServiceConfig


def is_open(now: time, opens_at: time, closes_at: time) -> bool:
    """True when ``now`` lies strictly between opening and closing time.

    Overnight hours (``closes_at`` before ``opens_at``) never match.
    """
    return opens_at < now < closes_at


def is_peak_hour(now: time, config: ServiceConfig = DEFAULT_SERVICE_CONFIG) -> bool:
    # Windows match on the hour, so 10:45 still counts as the 08-10 window.
    return any(start <= now.hour <= end for start, end in config.peak_hours)


def serving_radius_km(now: time, config: ServiceConfig = DEFAULT_SERVICE_CONFIG) -> float:
    """Return how far (in km) restaurants can serve at the given time of day."""
    if is_peak_hour(now, config):
        return config.peak_radius_km
    return config.normal_radius_km
