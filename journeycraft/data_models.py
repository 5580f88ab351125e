# journeycraft/data_models.py
import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .geo import distance_km, is_valid_coordinate


class Category(str, Enum):
    """Point-of-interest category."""
    RESTAURANT = "restaurant"
    ATTRACTION = "attraction"
    HOTEL = "hotel"
    SHOPPING = "shopping"
    NATURE = "nature"
    MUSEUM = "museum"
    ENTERTAINMENT = "entertainment"
    TRANSPORT = "transport"
    WELLNESS = "wellness"
    OUTDOOR = "outdoor"

    @property
    def label(self) -> str:
        return self.value.title()


class PriceLevel(IntEnum):
    FREE = 0
    BUDGET = 1
    MODERATE = 2
    EXPENSIVE = 3
    LUXURY = 4

    @property
    def symbol(self) -> str:
        return "Free" if self is PriceLevel.FREE else "$" * self.value


class TravelStyle(str, Enum):
    ADVENTURE = "adventure"
    RELAXATION = "relaxation"
    CULTURAL = "cultural"
    BALANCED = "balanced"

    @property
    def label(self) -> str:
        return self.value.title()

    @property
    def description(self) -> str:
        return TRAVEL_STYLE_DESCRIPTIONS[self]


class TransportationType(str, Enum):
    WALKING = "walking"
    CYCLING = "cycling"
    PUBLIC_TRANSPORT = "public_transport"
    CAR = "car"
    MIXED = "mixed"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def emission_factor(self) -> float:
        """kg CO2 per km."""
        return TRANSPORT_EMISSION_FACTORS[self]

    @property
    def eco_rating(self) -> int:
        return TRANSPORT_ECO_RATINGS[self]


class InterestCategory(str, Enum):
    FOOD = "food"
    NATURE = "nature"
    HISTORY = "history"
    SHOPPING = "shopping"
    NIGHTLIFE = "nightlife"
    ART = "art"
    SPORTS = "sports"
    WELLNESS = "wellness"

    @property
    def label(self) -> str:
        return INTEREST_LABELS[self]


TRAVEL_STYLE_DESCRIPTIONS: Dict[TravelStyle, str] = {
    TravelStyle.ADVENTURE: "Thrilling activities and outdoor exploration",
    TravelStyle.RELAXATION: "Peaceful experiences and wellness activities",
    TravelStyle.CULTURAL: "Museums, art, and local traditions",
    TravelStyle.BALANCED: "Perfect mix of all travel experiences",
}

INTEREST_LABELS: Dict[InterestCategory, str] = {
    InterestCategory.FOOD: "Food & Dining",
    InterestCategory.NATURE: "Nature & Parks",
    InterestCategory.HISTORY: "History & Heritage",
    InterestCategory.SHOPPING: "Shopping",
    InterestCategory.NIGHTLIFE: "Nightlife",
    InterestCategory.ART: "Art & Museums",
    InterestCategory.SPORTS: "Sports & Recreation",
    InterestCategory.WELLNESS: "Wellness & Spa",
}

# kg CO2 per km travelled
TRANSPORT_EMISSION_FACTORS: Dict[TransportationType, float] = {
    TransportationType.WALKING: 0.0,
    TransportationType.CYCLING: 0.0,
    TransportationType.PUBLIC_TRANSPORT: 0.089,
    TransportationType.CAR: 0.171,
    TransportationType.MIXED: 0.1,
}

TRANSPORT_ECO_RATINGS: Dict[TransportationType, int] = {
    TransportationType.WALKING: 5,
    TransportationType.CYCLING: 5,
    TransportationType.PUBLIC_TRANSPORT: 4,
    TransportationType.MIXED: 3,
    TransportationType.CAR: 2,
}

# Estimated spend per visit, by price level
PRICE_LEVEL_COST: Dict[PriceLevel, float] = {
    PriceLevel.FREE: 0.0,
    PriceLevel.BUDGET: 15.0,
    PriceLevel.MODERATE: 35.0,
    PriceLevel.EXPENSIVE: 75.0,
    PriceLevel.LUXURY: 150.0,
}


def parse_enum(enum_cls, raw):
    """Accept an enum member, its value or its (case-insensitive) name."""
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        pass
    if isinstance(raw, str):
        key = raw.strip().upper().replace(" ", "_").replace("-", "_")
        if key in enum_cls.__members__:
            return enum_cls.__members__[key]
    raise ValueError(f"{raw!r} is not a valid {enum_cls.__name__}")


@dataclass(frozen=True)
class Coordinate:
    """Latitude/longitude pair in degrees.

    Construction never fails so that malformed feed data can still be carried
    around; use ``is_valid`` before doing arithmetic with it.
    """
    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        return is_valid_coordinate(self.latitude, self.longitude)

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class Location:
    """A point of interest that can be visited on an itinerary."""
    name: str
    coordinate: Coordinate
    category: Category
    description: str = ""
    rating: float = 0.0                     # 0.0 to 5.0
    price_level: PriceLevel = PriceLevel.FREE
    is_eco_friendly: bool = False
    carbon_footprint: Optional[float] = None  # kg CO2 per visit
    estimated_visit_duration: float = 3600.0  # seconds
    opening_hours: Tuple[str, ...] = ()
    tags: FrozenSet[str] = frozenset()
    image_url: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def distance_from(self, coordinate: Coordinate) -> float:
        """Great-circle distance in km; raises InvalidCoordinate on bad input."""
        return distance_km(self.coordinate, coordinate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "category": self.category.value,
            "rating": self.rating,
            "price_level": int(self.price_level),
            "is_eco_friendly": self.is_eco_friendly,
            "carbon_footprint": self.carbon_footprint,
            "estimated_visit_duration": self.estimated_visit_duration,
            "opening_hours": list(self.opening_hours),
            "tags": sorted(self.tags),
            "image_url": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Location":
        """Build a Location from its JSON form.

        Raises:
            KeyError: a required field (name, latitude, longitude, category) is missing.
            ValueError: a field has the wrong type or an unknown enum value.
        """
        footprint = data.get("carbon_footprint")
        kwargs: Dict[str, Any] = dict(
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            coordinate=Coordinate(float(data["latitude"]), float(data["longitude"])),
            category=parse_enum(Category, data["category"]),
            rating=float(data.get("rating", 0.0)),
            price_level=parse_enum(PriceLevel, data.get("price_level", 0)),
            is_eco_friendly=bool(data.get("is_eco_friendly", False)),
            carbon_footprint=None if footprint is None else float(footprint),
            estimated_visit_duration=float(data.get("estimated_visit_duration", 3600.0)),
            opening_hours=tuple(data.get("opening_hours") or ()),
            tags=frozenset(data.get("tags") or ()),
            image_url=data.get("image_url"),
        )
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)


@dataclass
class UserPreferences:
    """Snapshot of the traveller's preferences, passed by value into generation."""
    travel_style: TravelStyle = TravelStyle.BALANCED
    interests: FrozenSet[InterestCategory] = frozenset()
    eco_friendly_mode: bool = True
    preferred_transportation: TransportationType = TransportationType.MIXED
    favorite_location_ids: set = field(default_factory=set)

    def add_to_favorites(self, location_id: str) -> None:
        self.favorite_location_ids.add(location_id)

    def remove_from_favorites(self, location_id: str) -> None:
        self.favorite_location_ids.discard(location_id)

    def is_favorite(self, location_id: str) -> bool:
        return location_id in self.favorite_location_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "travel_style": self.travel_style.value,
            "interests": sorted(i.value for i in self.interests),
            "eco_friendly_mode": self.eco_friendly_mode,
            "preferred_transportation": self.preferred_transportation.value,
            "favorite_location_ids": sorted(self.favorite_location_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferences":
        return cls(
            travel_style=parse_enum(TravelStyle, data.get("travel_style", TravelStyle.BALANCED)),
            interests=frozenset(parse_enum(InterestCategory, i) for i in data.get("interests") or ()),
            eco_friendly_mode=bool(data.get("eco_friendly_mode", True)),
            preferred_transportation=parse_enum(
                TransportationType, data.get("preferred_transportation", TransportationType.MIXED)),
            favorite_location_ids=set(data.get("favorite_location_ids") or ()),
        )


@dataclass
class ItineraryRequest:
    """User input model for a smart-generation request."""
    title: str
    start_date: str           # ISO-8601 date or datetime
    end_date: str             # ISO-8601 date or datetime
    latitude: float
    longitude: float
    preferences: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.title or not isinstance(self.title, str):
            raise ValueError("title must be a non-empty string")
        if self.preferences is None:
            self.preferences = {}
        elif not isinstance(self.preferences, dict):
            raise ValueError("preferences must be an object")
        self.latitude = float(self.latitude)
        self.longitude = float(self.longitude)

    @property
    def origin(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)
