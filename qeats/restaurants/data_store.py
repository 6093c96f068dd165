from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable, Iterable

import pandas as pd

from .config import DEFAULT_DATA_CONFIG, DataConfig
from .models import ItemRecord, MenuRecord, RestaurantRecord

RESTAURANTS_FILE = "restaurants.json"
MENUS_FILE = "menus.json"
ITEMS_FILE = "items.json"

RESTAURANT_COLUMNS = [
    "id",
    "restaurantId",
    "name",
    "city",
    "imageUrl",
    "latitude",
    "longitude",
    "opensAt",
    "closesAt",
    "attributes",
]
ITEM_COLUMNS = ["itemId", "name", "attributes", "price", "imageUrl", "itemType"]
MENU_COLUMNS = ["restaurantId", "itemIds"]


def _as_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return []


def _optional(value: Any) -> Any:
    if value is None or isinstance(value, (list, tuple)):
        return value
    return None if pd.isna(value) else value


def _attribute_matcher(term: str) -> Callable[[list[str]], bool]:
    """Match like the store's attribute query: exact membership or case-insensitive regex."""
    try:
        pattern = re.compile(term, re.IGNORECASE)
    except re.error:
        pattern = re.compile(re.escape(term), re.IGNORECASE)

    def matches(attributes: list[str]) -> bool:
        return term in attributes or any(pattern.search(a) for a in attributes)

    return matches


def _select(df: pd.DataFrame, mask: pd.Series) -> pd.DataFrame:
    return df.loc[mask.astype(bool)]


def _prepare_restaurants(df: pd.DataFrame) -> pd.DataFrame:
    df = df.reindex(columns=RESTAURANT_COLUMNS).copy()
    df["id"] = df["id"].fillna(df["restaurantId"])
    df["id"] = df["id"].astype(str)
    df["restaurantId"] = df["restaurantId"].astype(str)
    df["city"] = df["city"].fillna("")
    df["imageUrl"] = df["imageUrl"].fillna("")
    df["attributes"] = df["attributes"].apply(_as_list)
    return df.reset_index(drop=True)


def _prepare_items(df: pd.DataFrame) -> pd.DataFrame:
    df = df.reindex(columns=ITEM_COLUMNS).copy()
    df["itemId"] = df["itemId"].astype(str)
    df["attributes"] = df["attributes"].apply(_as_list)
    return df.drop_duplicates(subset="itemId").reset_index(drop=True)


def _prepare_menu_links(df: pd.DataFrame) -> pd.DataFrame:
    # One row per (restaurantId, itemId) pair
    df = df.reindex(columns=MENU_COLUMNS).copy()
    df["itemIds"] = df["itemIds"].apply(_as_list)
    links = df.explode("itemIds").dropna(subset=["itemIds"])
    links = links.rename(columns={"itemIds": "itemId"})
    links["restaurantId"] = links["restaurantId"].astype(str)
    links["itemId"] = links["itemId"].astype(str)
    return links.reset_index(drop=True)


def row_to_restaurant_record(row: pd.Series) -> RestaurantRecord:
    return RestaurantRecord(
        id=row["id"],
        restaurant_id=row["restaurantId"],
        name=row["name"],
        city=row["city"],
        image_url=row["imageUrl"],
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        opens_at=row["opensAt"],
        closes_at=row["closesAt"],
        attributes=list(row["attributes"]),
    )


def row_to_item_record(row: pd.Series) -> ItemRecord:
    price = _optional(row["price"])
    return ItemRecord(
        item_id=row["itemId"],
        name=row["name"],
        attributes=list(row["attributes"]),
        price=float(price) if price is not None else None,
        image_url=_optional(row["imageUrl"]),
        item_type=_optional(row["itemType"]),
    )


class RestaurantDataStore:
    """In-memory restaurant, menu and item tables.

    Every lookup returns an unordered list of records. Nothing found is an
    empty list, never an error.
    """

    def __init__(
        self,
        restaurants: pd.DataFrame,
        menus: pd.DataFrame,
        items: pd.DataFrame,
    ) -> None:
        self._restaurants = _prepare_restaurants(restaurants)
        self._menu_links = _prepare_menu_links(menus)
        self._items = _prepare_items(items)

    @classmethod
    def from_records(
        cls,
        restaurants: Iterable[dict[str, Any]],
        menus: Iterable[dict[str, Any]] = (),
        items: Iterable[dict[str, Any]] = (),
    ) -> RestaurantDataStore:
        return cls(
            pd.DataFrame(list(restaurants), columns=RESTAURANT_COLUMNS),
            pd.DataFrame(list(menus), columns=MENU_COLUMNS),
            pd.DataFrame(list(items), columns=ITEM_COLUMNS),
        )

    @classmethod
    def from_directory(cls, directory: Path) -> RestaurantDataStore:
        def _read(filename: str, columns: list[str]) -> pd.DataFrame:
            path = directory / filename
            if not path.exists():
                return pd.DataFrame(columns=columns)
            return pd.read_json(path, orient="records", dtype=False, convert_dates=False)

        return cls(
            _read(RESTAURANTS_FILE, RESTAURANT_COLUMNS),
            _read(MENUS_FILE, MENU_COLUMNS),
            _read(ITEMS_FILE, ITEM_COLUMNS),
        )

    # ── Restaurants ─────────────────────────────────────────────────────

    def find_all(self) -> list[RestaurantRecord]:
        return self._to_restaurants(self._restaurants)

    def find_restaurants_by_name(self, name: str) -> list[RestaurantRecord]:
        df = self._restaurants
        return self._to_restaurants(_select(df, df["name"] == name))

    def find_restaurants_by_attributes(self, term: str) -> list[RestaurantRecord]:
        df = self._restaurants
        return self._to_restaurants(_select(df, df["attributes"].apply(_attribute_matcher(term))))

    def find_restaurants_by_ids(self, restaurant_ids: Iterable[str]) -> list[RestaurantRecord]:
        df = self._restaurants
        return self._to_restaurants(_select(df, df["restaurantId"].isin(list(restaurant_ids))))

    # ── Items and menus ─────────────────────────────────────────────────

    def find_items_by_name(self, name: str) -> list[ItemRecord]:
        df = self._items
        return self._to_items(_select(df, df["name"] == name))

    def find_items_by_attributes(self, term: str) -> list[ItemRecord]:
        df = self._items
        return self._to_items(_select(df, df["attributes"].apply(_attribute_matcher(term))))

    def find_menus_by_item_ids(self, item_ids: Iterable[str]) -> list[MenuRecord]:
        """Return every menu containing at least one of the given items."""
        links = self._menu_links
        matched = links.loc[links["itemId"].isin(list(item_ids)), "restaurantId"].unique()
        if len(matched) == 0:
            return []

        rows = links[links["restaurantId"].isin(matched)].merge(self._items, on="itemId", how="inner")
        return [
            MenuRecord(restaurant_id=restaurant_id, items=self._to_items(group))
            for restaurant_id, group in rows.groupby("restaurantId", sort=False)
        ]

    @staticmethod
    def _to_restaurants(df: pd.DataFrame) -> list[RestaurantRecord]:
        return [row_to_restaurant_record(row) for _, row in df.iterrows()]

    @staticmethod
    def _to_items(df: pd.DataFrame) -> list[ItemRecord]:
        return [row_to_item_record(row) for _, row in df.iterrows()]


_store: RestaurantDataStore | None = None


def get_data_store(config: DataConfig = DEFAULT_DATA_CONFIG) -> RestaurantDataStore:
    """Return the process-wide data store, loading it on first call."""
    global _store
    if _store is None:
        _store = RestaurantDataStore.from_directory(config.data_dir)
    return _store
