# journeycraft/destination_source.py
"""Points-of-interest lookup.

The engine only depends on the ``DestinationSource`` protocol. The bundled
``CatalogDestinationSource`` answers from an in-memory pandas DataFrame,
loaded from CSV or built from mock data around a coordinate.
"""
import logging
import uuid
from typing import List, Optional, Protocol

import numpy as np
import pandas as pd

from .data_models import Category, Coordinate, Location, PriceLevel, parse_enum
from .geo import InvalidCoordinate, distances_km_from
from .recommendation_engine import rank_by_similarity

logger = logging.getLogger(__name__)

SEARCH_RADIUS_M = 10000.0
ALTERNATIVES_RADIUS_M = 2000.0

CATALOG_COLUMNS = [
    'id', 'name', 'description', 'latitude', 'longitude', 'category', 'rating',
    'price_level', 'is_eco_friendly', 'carbon_footprint', 'estimated_visit_duration',
    'opening_hours', 'tags',
]


class DestinationSource(Protocol):
    def nearby(self, category: Optional[Category], radius: float, around: Coordinate) -> List[Location]:
        """Locations within ``radius`` meters of ``around``; ``category=None`` means all."""
        ...

    def search(self, query: str, near: Coordinate) -> List[Location]:
        ...


def _split(value, sep: str) -> List[str]:
    """Catalog list cells are either real lists or ``sep``-joined strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(sep) if part.strip()]
    return [str(part) for part in value]


def _cell(row: dict, key: str, default=None):
    """Missing keys and NaN cells both read as ``default``."""
    value = row.get(key)
    if value is None or (not isinstance(value, (list, tuple)) and pd.isna(value)):
        return default
    return value


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes')
    return bool(value)


def _row_to_location(row: dict) -> Location:
    footprint = _cell(row, 'carbon_footprint')
    location_id = _cell(row, 'id') or str(uuid.uuid4())

    return Location(
        id=str(location_id),
        name=str(row['name']),
        description=str(_cell(row, 'description', '')),
        # NaN coordinates are kept; nearby() never matches them
        coordinate=Coordinate(float(row['latitude']), float(row['longitude'])),
        category=parse_enum(Category, str(row['category']).strip().lower()),
        rating=float(_cell(row, 'rating', 0.0)),
        price_level=parse_enum(PriceLevel, int(_cell(row, 'price_level', 0))),
        is_eco_friendly=_flag(_cell(row, 'is_eco_friendly', False)),
        carbon_footprint=None if footprint is None else float(footprint),
        estimated_visit_duration=float(_cell(row, 'estimated_visit_duration', 3600.0)),
        opening_hours=tuple(_split(_cell(row, 'opening_hours'), ';')),
        tags=frozenset(_split(_cell(row, 'tags'), ',')),
    )


class CatalogDestinationSource:
    """DestinationSource backed by a catalog DataFrame (one row per place)."""

    def __init__(self, catalog: pd.DataFrame):
        locations = []
        for position, row in enumerate(catalog.to_dict('records')):
            try:
                locations.append(_row_to_location(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed catalog row %s (%r): %s", position, row.get('name'), e)

        self._locations = locations
        self._categories = np.array([l.category.value for l in locations], dtype=object)
        self._lats = np.array([l.coordinate.latitude for l in locations], dtype=float)
        self._lons = np.array([l.coordinate.longitude for l in locations], dtype=float)
        logger.info("Loaded %d/%d catalog places", len(locations), len(catalog))

    def __len__(self) -> int:
        return len(self._locations)

    def nearby(self, category: Optional[Category] = None, radius: float = SEARCH_RADIUS_M,
               around: Optional[Coordinate] = None) -> List[Location]:
        if around is None or not self._locations:
            return []
        try:
            distances = distances_km_from(around, self._lats, self._lons)
        except InvalidCoordinate as e:
            logger.warning("Nearby lookup around an invalid coordinate: %s", e)
            return []

        mask = np.nan_to_num(distances, nan=np.inf) * 1000.0 <= radius
        if category is not None:
            mask &= self._categories == category.value
        return [self._locations[i] for i in np.flatnonzero(mask)]

    def search(self, query: str, near: Coordinate) -> List[Location]:
        """Case-insensitive substring match on name, description and tags within 10 km,
        ranked by text similarity to the query."""
        needle = (query or '').strip().lower()
        if not needle:
            return []

        matches = [
            location for location in self.nearby(None, SEARCH_RADIUS_M, near)
            if needle in location.name.lower()
            or needle in location.description.lower()
            or any(needle in tag.lower() for tag in location.tags)
        ]
        return rank_by_similarity(needle, matches)

    def eco_friendly_alternatives(self, location: Location) -> List[Location]:
        """Eco-friendly places of the same category within 2 km, excluding ``location``."""
        alternatives = self.nearby(location.category, ALTERNATIVES_RADIUS_M, location.coordinate)
        return [alt for alt in alternatives if alt.is_eco_friendly and alt.id != location.id]


def mock_catalog(around: Coordinate) -> pd.DataFrame:
    """Demo catalog of places scattered within ~2 km of ``around``."""
    lat, lon = around.latitude, around.longitude
    rows = [
        ('Central Park', 'Beautiful urban park perfect for morning jogs and picnics',
         0.01, 0.01, 'nature', 4.7, 0, True, 0.0, 7200, '6:00 AM - 1:00 AM', 'outdoor,peaceful,jogging'),
        ('Local Art Museum', 'Contemporary art exhibitions featuring local and international artists',
         -0.005, 0.015, 'museum', 4.3, 2, True, 2.1, 5400, '10:00 AM - 6:00 PM', 'culture,art,educational'),
        ('Organic Café', 'Farm-to-table café serving locally sourced organic meals',
         0.008, -0.012, 'restaurant', 4.5, 2, True, 1.2, 3600, '7:00 AM - 3:00 PM', 'organic,healthy,local'),
        ('Vintage Market', 'Unique vintage clothing and handmade crafts from local artisans',
         -0.003, -0.008, 'shopping', 4.2, 1, True, 0.5, 4800, '11:00 AM - 7:00 PM', 'vintage,handmade,unique'),
        ('Wellness Spa', 'Holistic wellness center offering massages and meditation sessions',
         0.015, 0.005, 'wellness', 4.8, 3, True, 1.8, 5400, '9:00 AM - 8:00 PM', 'relaxation,wellness,spa'),
        ('Old Town Clock Tower', 'Historic landmark with panoramic views over the old town',
         -0.009, 0.004, 'attraction', 4.6, 1, True, 0.3, 3600, '9:00 AM - 9:00 PM', 'historic,landmark,views'),
        ('Blue Note Jazz Club', 'Intimate live music venue with late-night jam sessions',
         0.004, 0.009, 'entertainment', 4.4, 2, False, 3.5, 7200, '8:00 PM - 2:00 AM', 'music,nightlife,jazz'),
        ('Harbour Steakhouse', 'Classic grill house overlooking the marina',
         -0.012, -0.002, 'restaurant', 4.1, 3, False, 6.4, 5400, '5:00 PM - 11:00 PM', 'dinner,grill,seafood'),
    ]
    return pd.DataFrame([
        {
            'id': str(uuid.uuid4()), 'name': name, 'description': description,
            'latitude': lat + d_lat, 'longitude': lon + d_lon, 'category': category,
            'rating': rating, 'price_level': price, 'is_eco_friendly': eco,
            'carbon_footprint': footprint, 'estimated_visit_duration': duration,
            'opening_hours': hours, 'tags': tags,
        }
        for (name, description, d_lat, d_lon, category, rating, price, eco,
             footprint, duration, hours, tags) in rows
    ], columns=CATALOG_COLUMNS)


def load_catalog(path: str, around: Coordinate) -> pd.DataFrame:
    """Read the catalog CSV, falling back to mock data around ``around``."""
    try:
        catalog = pd.read_csv(path)
    except FileNotFoundError:
        logger.warning("%s not found. Using mock catalog around (%s, %s).",
                       path, around.latitude, around.longitude)
        return mock_catalog(around)

    missing = [c for c in ('name', 'latitude', 'longitude', 'category') if c not in catalog.columns]
    if missing:
        raise ValueError(f"catalog {path} is missing columns: {', '.join(missing)}")
    return catalog

