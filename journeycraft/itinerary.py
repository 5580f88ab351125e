# journeycraft/itinerary.py
"""Itinerary entity and its derived trip metrics.

Derived fields (distance, carbon footprint, cost, eco flag) are a pure
function of the destination list. Every structural mutation goes through a
method here that restores them before returning.
"""
import copy
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Sequence

from .data_models import (
    PRICE_LEVEL_COST,
    Location,
    TransportationType,
    TravelStyle,
    parse_enum,
)
from .geo import InvalidCoordinate, distance_km

logger = logging.getLogger(__name__)

# Trip-level emission factor (kg CO2/km) for the generic mixed-transport estimate
TRIP_EMISSION_FACTOR = 0.21
ECO_FRIENDLY_THRESHOLD_KG = 50.0
ECO_SCORE_MAX_FOOTPRINT_KG = 100.0
SECONDS_PER_DAY = 86400


def _now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_total_distance(destinations: Sequence[Location]) -> float:
    """Sum of great-circle km between consecutive destinations.

    A pair with a bad coordinate (or a non-finite segment) is skipped rather
    than aborting the whole sum.
    """
    if len(destinations) < 2:
        return 0.0

    total = 0.0
    for start, end in zip(destinations, destinations[1:]):
        try:
            segment = distance_km(start.coordinate, end.coordinate)
        except InvalidCoordinate as e:
            logger.warning("Skipping segment %r -> %r: %s", start.name, end.name, e)
            continue
        if not math.isfinite(segment) or segment < 0:
            logger.warning("Skipping invalid segment distance %r between %r and %r",
                           segment, start.name, end.name)
            continue
        total += segment

    return total if math.isfinite(total) else 0.0


def calculate_carbon_footprint(destinations: Sequence[Location], distance: float) -> float:
    """kg CO2 for travelling ``distance`` km plus each destination's own footprint."""
    if not math.isfinite(distance) or distance < 0:
        logger.warning("Invalid distance for carbon footprint calculation: %r", distance)
        return 0.0

    transport_footprint = distance * TRIP_EMISSION_FACTOR
    if not math.isfinite(transport_footprint):
        logger.warning("Invalid transport footprint calculated")
        return 0.0

    location_footprints = 0.0
    for location in destinations:
        value = location.carbon_footprint
        if value is None:
            continue
        if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
            logger.warning("Ignoring malformed carbon footprint %r for %r", value, location.name)
            continue
        location_footprints += value

    if not math.isfinite(location_footprints):
        logger.warning("Invalid location footprints calculated")
        return max(0.0, transport_footprint)

    total = transport_footprint + location_footprints
    return max(0.0, total) if math.isfinite(total) else 0.0


def calculate_estimated_cost(destinations: Iterable[Location]) -> float:
    return sum(PRICE_LEVEL_COST.get(location.price_level, 0.0) for location in destinations)


def eco_score(footprint: float) -> int:
    """0-5 star rating; 0 kg scores 5, 100 kg or more scores 0."""
    if not math.isfinite(footprint):
        return 0
    return min(5, max(0, round((1.0 - footprint / ECO_SCORE_MAX_FOOTPRINT_KG) * 5)))


@dataclass
class Itinerary:
    """A planned multi-destination trip."""
    title: str
    description: str = ""
    destinations: List[Location] = field(default_factory=list)
    start_date: datetime = field(default_factory=_now)
    end_date: datetime = field(default_factory=lambda: _now() + timedelta(days=1))
    travel_style: TravelStyle = TravelStyle.BALANCED
    preferred_transportation: TransportationType = TransportationType.MIXED
    tags: List[str] = field(default_factory=list)
    notes: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    # Derived; always consistent with ``destinations``
    total_distance: float = field(init=False, default=0.0)            # km
    estimated_carbon_footprint: float = field(init=False, default=0.0)  # kg CO2
    estimated_cost: float = field(init=False, default=0.0)
    is_eco_friendly: bool = field(init=False, default=True)

    def __post_init__(self):
        self.destinations = list(self.destinations)
        self.tags = list(self.tags)
        self.recompute_derived()

    # --- Derived metrics ---

    def recompute_derived(self) -> None:
        """Recompute every derived field from the current destination list.

        Idempotent, and leaves ``updated_at`` alone; mutators bump it.
        """
        self.total_distance = calculate_total_distance(self.destinations)
        self.estimated_carbon_footprint = calculate_carbon_footprint(
            self.destinations, self.total_distance)
        self.estimated_cost = calculate_estimated_cost(self.destinations)
        self.is_eco_friendly = self.estimated_carbon_footprint <= ECO_FRIENDLY_THRESHOLD_KG

    @property
    def eco_friendly_score(self) -> int:
        return eco_score(self.estimated_carbon_footprint)

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.end_date - self.start_date).total_seconds())

    @property
    def formatted_duration(self) -> str:
        days = int(self.duration_seconds // SECONDS_PER_DAY)
        if days == 0:
            return "Same day"
        if days == 1:
            return "1 day"
        return f"{days} days"

    # --- Mutations ---

    def _touch(self) -> None:
        self.recompute_derived()
        self.updated_at = _now()

    def add_destination(self, location: Location) -> None:
        self.destinations.append(location)
        self._touch()

    def remove_destination_at(self, index: int) -> bool:
        """Remove the destination at ``index``.

        An out-of-range index (negative included) is ignored: nothing is
        recomputed, ``updated_at`` is untouched and False is returned.
        """
        if not 0 <= index < len(self.destinations):
            logger.debug("Ignoring remove at index %s on %s destinations", index, len(self.destinations))
            return False
        del self.destinations[index]
        self._touch()
        return True

    def reorder_destinations(self, from_indices: Iterable[int], to_index: int) -> bool:
        """Move the destinations at ``from_indices`` so they land before ``to_index``.

        ``to_index`` refers to positions in the list *before* the move
        (0..len). Moved items keep their relative order. Any out-of-range
        index makes the whole call a no-op returning False.
        """
        n = len(self.destinations)
        sources = sorted(set(from_indices))
        if not sources or not 0 <= to_index <= n or any(not 0 <= i < n for i in sources):
            logger.debug("Ignoring reorder %s -> %s on %s destinations", sources, to_index, n)
            return False

        moving = set(sources)
        moved = [self.destinations[i] for i in sources]
        before = [d for i, d in enumerate(self.destinations[:to_index]) if i not in moving]
        after = [d for i, d in enumerate(self.destinations[to_index:], start=to_index) if i not in moving]
        self.destinations = before + moved + after
        self._touch()
        return True

    def replace_destinations(self, destinations: Iterable[Location]) -> None:
        self.destinations = list(destinations)
        self._touch()

    def copy_as_duplicate(self) -> "Itinerary":
        """A deep copy with a fresh id, a " (Copy)" title and new timestamps."""
        duplicated = copy.deepcopy(self)
        duplicated.id = str(uuid.uuid4())
        duplicated.title = f"{self.title} (Copy)"
        duplicated.created_at = duplicated.updated_at = _now()
        return duplicated

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "destinations": [d.to_dict() for d in self.destinations],
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "travel_style": self.travel_style.value,
            "preferred_transportation": self.preferred_transportation.value,
            "tags": list(self.tags),
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "total_distance": self.total_distance,
            "estimated_carbon_footprint": self.estimated_carbon_footprint,
            "estimated_cost": self.estimated_cost,
            "is_eco_friendly": self.is_eco_friendly,
            "eco_friendly_score": self.eco_friendly_score,
            "formatted_duration": self.formatted_duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Itinerary":
        """Rebuild an itinerary; stored derived fields are ignored and recomputed."""
        kwargs: Dict[str, Any] = dict(
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            destinations=[Location.from_dict(d) for d in data.get("destinations") or ()],
            travel_style=parse_enum(TravelStyle, data.get("travel_style", TravelStyle.BALANCED)),
            preferred_transportation=parse_enum(
                TransportationType, data.get("preferred_transportation", TransportationType.MIXED)),
            tags=list(data.get("tags") or ()),
            notes=str(data.get("notes") or ""),
        )
        for key in ("start_date", "end_date", "created_at", "updated_at"):
            if data.get(key):
                kwargs[key] = parse_datetime(data[key])
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)


def parse_datetime(value) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
