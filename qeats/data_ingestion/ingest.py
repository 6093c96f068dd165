"""
Data ingestion for the QEats restaurant service.

- Read raw restaurant and menu dumps (JSON lists of documents).
- Normalize them into the canonical restaurant, menu and item schema.
- Persist processed JSON files that the restaurant data store loads.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List

import pandas as pd

from ..restaurants.data_store import (
    ITEM_COLUMNS,
    ITEMS_FILE,
    MENUS_FILE,
    RESTAURANT_COLUMNS,
    RESTAURANTS_FILE,
)
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

_TIME_FORMATS: List[str] = ["%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p"]


def _normalize_time(value: Any) -> str | None:
    if value is None:
        return None
    raw = str(value).strip()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).strftime("%H:%M")
        except ValueError:
            continue
    return None


def _clean_attributes(value: Any) -> list[str]:
    # Some dumps carry attributes as a single comma separated string
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [str(a).strip() for a in value if str(a).strip()]


def _read_records(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        logger.warning("Raw file %s not found, treating it as empty", path)
        return []
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _normalize_restaurants(raw: list[dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(raw, dtype=object).reindex(columns=RESTAURANT_COLUMNS)
    df = df.dropna(subset=["restaurantId", "name"])

    df["restaurantId"] = df["restaurantId"].astype(str)
    df["id"] = df["id"].fillna(df["restaurantId"]).astype(str)
    df["city"] = df["city"].fillna("")
    df["imageUrl"] = df["imageUrl"].fillna("")
    df["latitude"] = pd.to_numeric(df["latitude"], errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")
    df["opensAt"] = df["opensAt"].apply(_normalize_time)
    df["closesAt"] = df["closesAt"].apply(_normalize_time)
    df["attributes"] = df["attributes"].apply(_clean_attributes)

    valid = (
        df["latitude"].between(-90, 90)
        & df["longitude"].between(-180, 180)
        & df["opensAt"].notna()
        & df["closesAt"].notna()
    )
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropping %d restaurants with bad coordinates or hours", dropped)

    return df.loc[valid].drop_duplicates(subset="restaurantId").reset_index(drop=True)


def _normalize_menus(raw: list[dict[str, Any]]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split raw menus into an item table and per-restaurant item id lists."""
    menus = pd.DataFrame(raw, dtype=object).reindex(columns=["restaurantId", "items"])
    menus = menus.dropna(subset=["restaurantId"])
    menus["restaurantId"] = menus["restaurantId"].astype(str)
    menus["items"] = menus["items"].apply(lambda v: v if isinstance(v, list) else [])

    exploded = menus.explode("items").dropna(subset=["items"])
    items = pd.DataFrame(exploded["items"].tolist(), dtype=object).reindex(columns=ITEM_COLUMNS)
    items["restaurantId"] = exploded["restaurantId"].to_numpy()
    items = items.dropna(subset=["itemId", "name"])

    items["itemId"] = items["itemId"].astype(str)
    items["attributes"] = items["attributes"].apply(_clean_attributes)
    items["price"] = pd.to_numeric(items["price"], errors="coerce")

    menu_table = pd.DataFrame(
        [
            {"restaurantId": restaurant_id, "itemIds": list(dict.fromkeys(group["itemId"]))}
            for restaurant_id, group in items.groupby("restaurantId", sort=False)
        ],
        columns=["restaurantId", "itemIds"],
    )
    item_table = items[ITEM_COLUMNS].drop_duplicates(subset="itemId").reset_index(drop=True)
    return menu_table, item_table


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the ingestion pipeline.

    Steps:
    - Read raw restaurant and menu dumps.
    - Normalize restaurants; split menus into menu and item tables.
    - Persist processed JSON files and return their directory.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    restaurants = _normalize_restaurants(_read_records(config.raw_restaurants_path))
    menus, items = _normalize_menus(_read_records(config.raw_menus_path))

    out = config.processed_data_dir
    restaurants.to_json(out / RESTAURANTS_FILE, orient="records", indent=2)
    menus.to_json(out / MENUS_FILE, orient="records", indent=2)
    items.to_json(out / ITEMS_FILE, orient="records", indent=2)

    logger.info(
        "Ingested %d restaurants, %d menus and %d items into %s",
        len(restaurants),
        len(menus),
        len(items),
        out,
    )
    return out


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")
