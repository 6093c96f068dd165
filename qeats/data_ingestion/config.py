from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the restaurant data ingestion pipeline.
    """

    raw_data_dir: Path = Path("qeats/data/raw")
    processed_data_dir: Path = Path("qeats/data/processed")
    restaurants_filename: str = "restaurants.json"
    menus_filename: str = "menus.json"
    items_filename: str = "items.json"

    @property
    def raw_restaurants_path(self) -> Path:
        return self.raw_data_dir / self.restaurants_filename

    @property
    def raw_menus_path(self) -> Path:
        return self.raw_data_dir / self.menus_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
