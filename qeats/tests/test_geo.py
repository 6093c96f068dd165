from __future__ import annotations

from datetime import time

import pytest

from conftest import QUERY_LAT, QUERY_LON, make_restaurant, north_of
from qeats.restaurants.config import ServiceConfig
from qeats.restaurants.geo import distance_km, is_eligible
from qeats.restaurants.hours import is_open, serving_radius_km
from qeats.restaurants.models import Location, RestaurantRecord

KORAMANGALA = Location(latitude=12.9352, longitude=77.6245)
INDIRANAGAR = Location(latitude=12.9791, longitude=77.6408)
QUERY = Location(latitude=QUERY_LAT, longitude=QUERY_LON)


# ── Distance ─────────────────────────────────────────────────────────────


def test_distance_is_symmetric():
    assert distance_km(KORAMANGALA, INDIRANAGAR) == pytest.approx(distance_km(INDIRANAGAR, KORAMANGALA))


def test_distance_to_self_is_zero():
    assert distance_km(KORAMANGALA, KORAMANGALA) == pytest.approx(0.0, abs=1e-9)


def test_distance_known_value():
    # Koramangala to Indiranagar is roughly 5.2 km as the crow flies
    assert distance_km(KORAMANGALA, INDIRANAGAR) == pytest.approx(5.2, abs=0.2)


def test_distance_due_north():
    target = Location(latitude=north_of(QUERY_LAT, 2.0), longitude=QUERY_LON)
    assert distance_km(QUERY, target) == pytest.approx(2.0, rel=1e-6)


def test_distance_antipodal_points():
    a = Location(latitude=0.0, longitude=0.0)
    b = Location(latitude=0.0, longitude=180.0)
    assert distance_km(a, b) == pytest.approx(20015.1, abs=1.0)


# ── Open hours ───────────────────────────────────────────────────────────


def test_is_open_inside_hours():
    assert is_open(time(20, 0), time(18, 0), time(23, 0))


def test_is_closed_exactly_at_opening():
    assert not is_open(time(18, 0), time(18, 0), time(23, 0))


def test_is_closed_exactly_at_closing():
    assert not is_open(time(23, 0), time(18, 0), time(23, 0))


def test_overnight_hours_never_open():
    assert not is_open(time(23, 30), time(22, 0), time(2, 0))
    assert not is_open(time(1, 0), time(22, 0), time(2, 0))


# ── Serving radius ───────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "now,expected",
    [
        (time(9, 0), 3.0),
        (time(12, 0), 5.0),
        (time(13, 30), 3.0),
        (time(20, 0), 3.0),
        (time(23, 0), 5.0),
        (time(8, 0), 3.0),
        (time(10, 59), 3.0),
        (time(11, 0), 5.0),
        (time(7, 59), 5.0),
    ],
)
def test_serving_radius(now, expected):
    assert serving_radius_km(now) == expected


def test_serving_radius_uses_config():
    config = ServiceConfig(peak_radius_km=1.0, normal_radius_km=7.5, peak_hours=((12, 12),))
    assert serving_radius_km(time(12, 30), config) == 1.0
    assert serving_radius_km(time(9, 0), config) == 7.5


# ── Eligibility ──────────────────────────────────────────────────────────


def _record(**overrides) -> RestaurantRecord:
    return RestaurantRecord.model_validate(make_restaurant("42", "Test Kitchen", **overrides))


def test_restaurant_exactly_at_radius_is_excluded():
    record = _record(km_north=3.0)
    exact = distance_km(QUERY, record.location)
    assert not is_eligible(record, time(12, 0), QUERY, exact)


def test_restaurant_just_inside_radius_is_included():
    record = _record(km_north=3.0)
    exact = distance_km(QUERY, record.location)
    assert is_eligible(record, time(12, 0), QUERY, exact + 1e-9)


def test_closed_restaurant_is_not_eligible_even_when_close():
    record = _record(km_north=0.1, opensAt="18:00", closesAt="23:00")
    assert not is_eligible(record, time(12, 0), QUERY, 5.0)
