# journeycraft/routing.py
"""Point-to-point route estimates (straight-line distance, fixed mode speeds)."""
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .data_models import TRANSPORT_EMISSION_FACTORS, Coordinate, TransportationType
from .geo import distance_km

logger = logging.getLogger(__name__)

# Average door-to-door speeds in km/h
TRANSPORT_SPEED_KMH: Dict[TransportationType, float] = {
    TransportationType.WALKING: 5.0,
    TransportationType.CYCLING: 15.0,
    TransportationType.PUBLIC_TRANSPORT: 25.0,
    TransportationType.CAR: 40.0,
    TransportationType.MIXED: 30.0,
}

ECO_ROUTE_DETOUR = 1.1
SCENIC_ROUTE_DETOUR = 1.3


class TrafficCondition(str, Enum):
    LIGHT = "light"
    NORMAL = "normal"
    HEAVY = "heavy"
    SEVERE = "severe"

    @property
    def delay_multiplier(self) -> float:
        return TRAFFIC_DELAY_MULTIPLIERS[self]


TRAFFIC_DELAY_MULTIPLIERS: Dict[TrafficCondition, float] = {
    TrafficCondition.LIGHT: 0.8,
    TrafficCondition.NORMAL: 1.0,
    TrafficCondition.HEAVY: 1.4,
    TrafficCondition.SEVERE: 2.0,
}


@dataclass
class AlternativeRoute:
    name: str
    duration: float           # seconds
    distance: float           # km
    carbon_footprint: float   # kg CO2
    is_eco_friendly: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "duration": self.duration,
            "distance": self.distance,
            "carbon_footprint": self.carbon_footprint,
            "is_eco_friendly": self.is_eco_friendly,
        }


@dataclass
class Route:
    origin: Coordinate
    destination: Coordinate
    transportation: TransportationType
    distance: float           # km
    duration: float           # seconds, traffic included
    carbon_footprint: float   # kg CO2
    alternatives: List[AlternativeRoute] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "origin": self.origin.to_dict(),
            "destination": self.destination.to_dict(),
            "transportation": self.transportation.value,
            "distance": self.distance,
            "duration": self.duration,
            "carbon_footprint": self.carbon_footprint,
            "alternatives": [a.to_dict() for a in self.alternatives],
        }


def estimate_duration(distance: float, transportation: TransportationType) -> float:
    """Travel time in seconds for ``distance`` km; 0 for unusable input."""
    if not math.isfinite(distance) or distance < 0:
        logger.warning("Invalid distance for duration estimation: %r", distance)
        return 0.0
    duration = distance / TRANSPORT_SPEED_KMH[transportation] * 3600
    return duration if math.isfinite(duration) else 0.0


def transport_footprint(distance: float, transportation: TransportationType) -> float:
    """kg CO2 for ``distance`` km with the given mode of transport."""
    if not math.isfinite(distance) or distance < 0:
        logger.warning("Invalid distance for carbon footprint calculation: %r", distance)
        return 0.0
    footprint = distance * TRANSPORT_EMISSION_FACTORS[transportation]
    return footprint if math.isfinite(footprint) else 0.0


def alternative_routes(distance: float) -> List[AlternativeRoute]:
    eco_distance = distance * ECO_ROUTE_DETOUR
    scenic_distance = distance * SCENIC_ROUTE_DETOUR
    return [
        AlternativeRoute(
            name="Eco Route",
            duration=estimate_duration(eco_distance, TransportationType.PUBLIC_TRANSPORT),
            distance=eco_distance,
            carbon_footprint=transport_footprint(eco_distance, TransportationType.PUBLIC_TRANSPORT),
            is_eco_friendly=True,
        ),
        AlternativeRoute(
            name="Scenic Route",
            duration=estimate_duration(scenic_distance, TransportationType.WALKING),
            distance=scenic_distance,
            carbon_footprint=0.0,
            is_eco_friendly=True,
        ),
    ]


def plan_route(origin: Coordinate, destination: Coordinate, transportation: TransportationType,
               traffic: TrafficCondition = TrafficCondition.NORMAL) -> Route:
    """Estimate a direct route between two coordinates.

    Raises:
        InvalidCoordinate: if either endpoint is unusable.
    """
    distance = distance_km(origin, destination)
    duration = estimate_duration(distance, transportation) * traffic.delay_multiplier

    return Route(
        origin=origin,
        destination=destination,
        transportation=transportation,
        distance=distance,
        duration=duration,
        carbon_footprint=transport_footprint(distance, transportation),
        alternatives=alternative_routes(distance),
    )
