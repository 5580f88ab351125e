# journeycraft/geo.py
"""Great-circle distance helpers.

All public functions take objects exposing ``latitude`` and ``longitude`` in
degrees and return kilometres.
"""
import math
from typing import Sequence

import numpy as np

EARTH_RADIUS_M = 6_371_000.0


class InvalidCoordinate(ValueError):
    """A latitude/longitude that is non-finite or outside the valid range."""


def is_valid_coordinate(lat, lon) -> bool:
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return False
    return (math.isfinite(lat) and math.isfinite(lon)
            and -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0)


def _checked(coord):
    lat = getattr(coord, "latitude", None)
    lon = getattr(coord, "longitude", None)
    if not is_valid_coordinate(lat, lon):
        raise InvalidCoordinate(f"invalid coordinate ({lat!r}, {lon!r})")
    return float(lat), float(lon)


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters between two lat/lon points in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    # rounding can push ``a`` a hair past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def distance_km(a, b) -> float:
    """Great-circle distance between two coordinates in kilometres.

    Raises:
        InvalidCoordinate: if either coordinate is non-finite or out of range.
            Callers that accumulate distances over feed data catch this and
            skip the offending pair.
    """
    lat1, lon1 = _checked(a)
    lat2, lon2 = _checked(b)
    return haversine_m(lat1, lon1, lat2, lon2) / 1000.0


def distances_km_from(origin, lats, lons) -> np.ndarray:
    """Vectorised distance from ``origin`` to every (lat, lon) pair.

    Entries whose coordinates are invalid come back as NaN, so any ``<=``
    comparison against them is False.
    """
    lat0, lon0 = _checked(origin)
    lats = np.asarray(lats, dtype=float)
    lons = np.asarray(lons, dtype=float)
    with np.errstate(invalid="ignore"):
        valid = (np.isfinite(lats) & np.isfinite(lons)
                 & (np.abs(lats) <= 90.0) & (np.abs(lons) <= 180.0))
        phi1 = np.radians(lat0)
        phi2 = np.radians(lats)
        d_phi = phi2 - phi1
        d_lambda = np.radians(lons - lon0)
        a = np.sin(d_phi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
        a = np.clip(a, 0.0, 1.0)
        c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return np.where(valid, EARTH_RADIUS_M * c / 1000.0, np.nan)


def distance_matrix_km(coords: Sequence) -> np.ndarray:
    """Pairwise distance matrix in km.

    Pairs with an invalid endpoint are ``inf``; the diagonal is 0 for valid
    coordinates.
    """
    n = len(coords)
    matrix = np.full((n, n), np.inf)
    for i in range(n):
        try:
            _checked(coords[i])
        except InvalidCoordinate:
            continue
        matrix[i, i] = 0.0
        for j in range(i + 1, n):
            try:
                matrix[i, j] = matrix[j, i] = distance_km(coords[i], coords[j])
            except InvalidCoordinate:
                continue
    return matrix
