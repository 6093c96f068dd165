from __future__ import annotations

from datetime import time

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

SEARCH_TERM_MAX_LENGTH = 100


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class RestaurantView(_CamelModel):
    restaurant_id: str
    name: str
    city: str
    image_url: str
    latitude: float
    longitude: float
    opens_at: time
    closes_at: time
    attributes: list[str] = Field(default_factory=list)

    @field_serializer("opens_at", "closes_at")
    def _format_time(self, value: time) -> str:
        # "HH:MM" unless the store carried finer precision
        if value.second or value.microsecond:
            return value.isoformat()
        return value.strftime("%H:%M")

    @property
    def location(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude)


class RestaurantRecord(RestaurantView):
    """Restaurant as held by the backing store, including its storage id."""

    id: str


class ItemRecord(_CamelModel):
    item_id: str
    name: str
    attributes: list[str] = Field(default_factory=list)
    price: float | None = None
    image_url: str | None = None
    item_type: str | None = None


class MenuRecord(_CamelModel):
    restaurant_id: str
    items: list[ItemRecord] = Field(default_factory=list)


def record_to_view(record: RestaurantRecord) -> RestaurantView:
    """Project a stored restaurant onto the response shape, dropping its id."""
    return RestaurantView(
        restaurant_id=record.restaurant_id,
        name=record.name,
        city=record.city,
        image_url=record.image_url,
        latitude=record.latitude,
        longitude=record.longitude,
        opens_at=record.opens_at,
        closes_at=record.closes_at,
        attributes=list(record.attributes),
    )


class GetRestaurantsRequest(_CamelModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    search_for: str | None = Field(
        default=None,
        max_length=SEARCH_TERM_MAX_LENGTH,
        description="Optional name, attribute or dish to search for",
    )

    @property
    def location(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude)


class GetRestaurantsResponse(_CamelModel):
    restaurants: list[RestaurantView] = Field(default_factory=list)


class CacheStatsResponse(BaseModel):
    backend: str
    available: bool
    hits: int
    misses: int
    bypasses: int
    hit_rate: float
