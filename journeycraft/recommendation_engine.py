# journeycraft/recommendation_engine.py
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sklearn.feature_extraction.text import CountVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .data_models import Category, Coordinate, InterestCategory, Location, TravelStyle, UserPreferences

logger = logging.getLogger(__name__)

SLOT_SEARCH_RADIUS_M = 10000.0

Chooser = Callable[[Sequence[Location]], Location]


class TimeSlot(str, Enum):
    MORNING = "morning"
    LUNCH = "lunch"
    AFTERNOON = "afternoon"
    EVENING = "evening"


# slot -> (ordered interest->category rules, fallback categories)
SLOT_CATEGORY_RULES: Dict[TimeSlot, Tuple[List[Tuple[InterestCategory, Category]], List[Category]]] = {
    TimeSlot.MORNING: (
        [(InterestCategory.NATURE, Category.NATURE),
         (InterestCategory.WELLNESS, Category.WELLNESS),
         (InterestCategory.ART, Category.MUSEUM)],
        [Category.NATURE, Category.MUSEUM, Category.ATTRACTION],
    ),
    TimeSlot.LUNCH: (
        [],
        [Category.RESTAURANT],
    ),
    TimeSlot.AFTERNOON: (
        [(InterestCategory.SHOPPING, Category.SHOPPING),
         (InterestCategory.HISTORY, Category.MUSEUM),
         (InterestCategory.ART, Category.MUSEUM)],
        [Category.ATTRACTION, Category.SHOPPING, Category.MUSEUM],
    ),
    TimeSlot.EVENING: (
        [(InterestCategory.NIGHTLIFE, Category.ENTERTAINMENT),
         (InterestCategory.FOOD, Category.RESTAURANT)],
        [Category.ENTERTAINMENT, Category.RESTAURANT],
    ),
}

# None means every category is acceptable
TRAVEL_STYLE_CATEGORIES: Dict[TravelStyle, Optional[frozenset]] = {
    TravelStyle.ADVENTURE: frozenset({Category.NATURE, Category.ATTRACTION}),
    TravelStyle.RELAXATION: frozenset({Category.WELLNESS, Category.NATURE}),
    TravelStyle.CULTURAL: frozenset({Category.MUSEUM, Category.ATTRACTION}),
    TravelStyle.BALANCED: None,
}


def preferred_categories(slot: TimeSlot, preferences: UserPreferences) -> List[Category]:
    """Ordered categories to try for a time slot.

    Interest-driven categories come first in table order; when none of the
    user's interests apply, the slot's fallback list is used. Duplicates
    (e.g. history and art both mapping to museum) are kept, matching the
    rule table.
    """
    rules, fallback = SLOT_CATEGORY_RULES[slot]
    categories = [category for interest, category in rules if interest in preferences.interests]
    return categories or list(fallback)


def filter_by_preferences(locations: Sequence[Location], preferences: UserPreferences) -> List[Location]:
    """Apply the eco-friendly-mode filter and the travel-style category filter."""
    allowed = TRAVEL_STYLE_CATEGORIES[preferences.travel_style]
    filtered = []
    for location in locations:
        if preferences.eco_friendly_mode and not location.is_eco_friendly:
            continue
        if allowed is not None and location.category not in allowed:
            continue
        filtered.append(location)
    return filtered


def select_activity(slot: TimeSlot, preferences: UserPreferences, origin: Coordinate,
                    destination_source, chooser: Chooser) -> Optional[Location]:
    """Pick one destination for a slot, or None when nothing survives filtering.

    Categories are tried in order and the first one with a surviving
    candidate wins; results from different categories are never combined.
    """
    for category in preferred_categories(slot, preferences):
        try:
            locations = destination_source.nearby(category, SLOT_SEARCH_RADIUS_M, origin)
        except Exception as e:
            logger.warning("Destination lookup failed for %s/%s: %s", slot.value, category.value, e)
            continue
        candidates = filter_by_preferences(locations, preferences)
        if candidates:
            return chooser(candidates)

    logger.debug("No candidates for %s slot", slot.value)
    return None


def rank_by_similarity(query: str, locations: Sequence[Location]) -> List[Location]:
    """Rank locations by bag-of-words cosine similarity to ``query``.

    Ties keep their input order. If the texts yield no usable vocabulary the
    input order is returned unchanged.
    """
    if len(locations) < 2:
        return list(locations)

    documents = [
        " ".join([location.name, location.description, location.category.value, *sorted(location.tags)])
        for location in locations
    ]

    cv = CountVectorizer()
    try:
        count_matrix = cv.fit_transform([query] + documents)
    except ValueError:
        logger.debug("No vocabulary to rank %r; keeping catalog order", query)
        return list(locations)

    scores = cosine_similarity(count_matrix[0], count_matrix[1:])[0]
    order = sorted(range(len(locations)), key=lambda i: -scores[i])
    return [locations[i] for i in order]
