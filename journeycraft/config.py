# journeycraft/config.py
"""Configuration management for the itinerary API."""
import os

from dotenv import load_dotenv

from .data_models import Coordinate

load_dotenv()


def get_catalog_path():
    """CSV catalog of places; a mock catalog is used when the file is missing."""
    return os.getenv("JOURNEYCRAFT_CATALOG_PATH", "data/attractions.csv")


def get_store_path():
    """JSON file the itinerary repository persists to."""
    return os.getenv("JOURNEYCRAFT_STORE_PATH", "data/itineraries.json")


def get_default_origin():
    """Coordinate the mock catalog is centred on (San Francisco by default)."""
    return Coordinate(
        float(os.getenv("JOURNEYCRAFT_DEFAULT_LAT", "37.7749")),
        float(os.getenv("JOURNEYCRAFT_DEFAULT_LON", "-122.4194")),
    )


def get_port():
    return int(os.getenv("PORT", 5000))


def get_log_level():
    return os.getenv("LOG_LEVEL", "INFO").upper()
