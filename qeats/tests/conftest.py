from __future__ import annotations

import math

import pytest

from qeats.restaurants.data_store import RestaurantDataStore

# Query point used across tests (Koramangala, Bangalore)
QUERY_LAT = 12.95
QUERY_LON = 77.63

KM_PER_DEGREE_LAT = 6371.0 * math.pi / 180


def north_of(lat: float, km: float) -> float:
    """Latitude ``km`` kilometres due north of ``lat``."""
    return lat + km / KM_PER_DEGREE_LAT


def make_restaurant(restaurant_id: str, name: str, km_north: float = 1.0, **overrides) -> dict:
    record = {
        "id": f"oid-{restaurant_id}",
        "restaurantId": restaurant_id,
        "name": name,
        "city": "Koramangala",
        "imageUrl": f"https://images.qeats.example/{restaurant_id}.jpg",
        "latitude": north_of(QUERY_LAT, km_north),
        "longitude": QUERY_LON,
        "opensAt": "08:00",
        "closesAt": "22:00",
        "attributes": [],
    }
    record.update(overrides)
    return record


SAMPLE_RESTAURANTS = [
    make_restaurant("1", "Dosa Corner", km_north=1.0, attributes=["South Indian", "Vegetarian"]),
    make_restaurant("2", "Biryani House", km_north=2.0, attributes=["Andhra", "Spicy"]),
    make_restaurant("3", "Pizza Point", km_north=1.5, attributes=["Italian"]),
    # Too far for any radius
    make_restaurant("4", "Far Away Dosa", km_north=8.0, attributes=["South Indian"]),
    # Closed in the morning
    make_restaurant("5", "Night Owl", km_north=0.5, opensAt="18:00", closesAt="23:00", attributes=["Bar"]),
]

SAMPLE_MENUS = [
    {"restaurantId": "1", "itemIds": ["i1", "i2"]},
    {"restaurantId": "2", "itemIds": ["i3"]},
    {"restaurantId": "3", "itemIds": ["i4", "i1"]},
    {"restaurantId": "4", "itemIds": ["i1"]},
]

SAMPLE_ITEMS = [
    {"itemId": "i1", "name": "Masala Dosa", "attributes": ["South Indian", "Crispy"], "price": 90.0},
    {"itemId": "i2", "name": "Filter Coffee", "attributes": ["Beverage"], "price": 40.0},
    {"itemId": "i3", "name": "Chicken Biryani", "attributes": ["Spicy", "Non-Veg"], "price": 280.0},
    {"itemId": "i4", "name": "Margherita", "attributes": ["Italian", "Cheesy"], "price": 420.0},
]


@pytest.fixture
def store() -> RestaurantDataStore:
    return RestaurantDataStore.from_records(SAMPLE_RESTAURANTS, SAMPLE_MENUS, SAMPLE_ITEMS)
