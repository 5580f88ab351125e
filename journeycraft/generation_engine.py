# journeycraft/generation_engine.py
import logging
import math
import random
import threading
from datetime import datetime
from typing import List, Optional, Sequence

from .data_models import Coordinate, InterestCategory, Location, UserPreferences
from .itinerary import SECONDS_PER_DAY, Itinerary
from .recommendation_engine import Chooser, TimeSlot, select_activity

logger = logging.getLogger(__name__)

MAX_DESTINATIONS_PER_DAY = 4


class GenerationCancelled(RuntimeError):
    """Raised when a generation is abandoned through its cancel event."""


def day_count(start_date: datetime, end_date: datetime) -> int:
    """Whole days between the dates plus one, never less than 1."""
    elapsed = (end_date - start_date).total_seconds()
    return max(1, math.floor(elapsed / SECONDS_PER_DAY) + 1)


def slots_for(preferences: UserPreferences) -> List[TimeSlot]:
    slots = [TimeSlot.MORNING, TimeSlot.LUNCH, TimeSlot.AFTERNOON]
    if InterestCategory.NIGHTLIFE in preferences.interests:
        slots.append(TimeSlot.EVENING)
    return slots


def generate_destinations_for_day(day: int, origin: Coordinate, preferences: UserPreferences,
                                  destination_source, chooser: Chooser,
                                  cancel_event: Optional[threading.Event] = None) -> List[Location]:
    destinations: List[Location] = []
    for slot in slots_for(preferences):
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled(f"generation cancelled on day {day + 1}")
        if len(destinations) >= MAX_DESTINATIONS_PER_DAY:
            break
        activity = select_activity(slot, preferences, origin, destination_source, chooser)
        if activity is not None:
            destinations.append(activity)
    return destinations


def describe(preferences: UserPreferences, destinations: Sequence[Location]) -> str:
    categories = ", ".join(sorted({d.category.label for d in destinations}))
    return (f"A {preferences.travel_style.value} journey featuring {len(destinations)} "
            f"carefully selected destinations including {categories}. "
            f"{preferences.travel_style.description}")


def generate_tags(preferences: UserPreferences, destinations: Sequence[Location]) -> List[str]:
    tags = [preferences.travel_style.value]
    if preferences.eco_friendly_mode:
        tags.append("eco-friendly")
    tags.extend(sorted({d.category.value for d in destinations}))
    tags.extend(sorted(i.label.lower() for i in preferences.interests))
    # de-duplicate, first occurrence wins
    return list(dict.fromkeys(tags))


def generate_smart_itinerary(title: str, start_date: datetime, end_date: datetime,
                             origin: Coordinate, preferences: UserPreferences,
                             destination_source, chooser: Chooser = random.choice,
                             cancel_event: Optional[threading.Event] = None) -> Itinerary:
    """
    Builds a multi-day itinerary from the user's preferences.

    Each day tries morning, lunch and afternoon slots (plus evening for
    nightlife lovers), picking one filtered candidate per slot with
    ``chooser``. Slots without candidates are skipped, so the result may
    hold anywhere from zero to four stops per day.

    Args:
        title: Itinerary title.
        start_date: Trip start.
        end_date: Trip end.
        origin: Coordinate candidates are searched around.
        preferences: Snapshot of the user's preferences.
        destination_source: Anything with ``nearby(category, radius, around)``.
        chooser: Picks one location from a non-empty candidate list. Defaults
            to ``random.choice``; pass a deterministic function in tests.
        cancel_event: When set, generation stops and nothing is returned.

    Returns:
        A new Itinerary with derived metrics computed.

    Raises:
        GenerationCancelled: if ``cancel_event`` was set mid-generation.
    """
    days = day_count(start_date, end_date)
    logger.info("Generating '%s': %d day(s) around (%s, %s)",
                title, days, origin.latitude, origin.longitude)

    destinations: List[Location] = []
    for day in range(days):
        day_destinations = generate_destinations_for_day(
            day, origin, preferences, destination_source, chooser, cancel_event)
        logger.debug("Day %d: %d destination(s)", day + 1, len(day_destinations))
        destinations.extend(day_destinations)

    itinerary = Itinerary(
        title=title,
        description=describe(preferences, destinations),
        destinations=destinations,
        start_date=start_date,
        end_date=end_date,
        travel_style=preferences.travel_style,
        preferred_transportation=preferences.preferred_transportation,
        tags=generate_tags(preferences, destinations),
    )
    logger.info("Generated '%s' with %d destination(s), %.2f km",
                title, len(destinations), itinerary.total_distance)
    return itinerary
