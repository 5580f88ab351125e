# journeycraft/optimization_engine.py
import copy
import logging
from typing import List, Sequence

import numpy as np

from .data_models import Location
from .geo import distance_matrix_km
from .itinerary import Itinerary

logger = logging.getLogger(__name__)


def optimize(destinations: Sequence[Location]) -> List[Location]:
    """
    Reorders destinations with a greedy nearest-neighbour walk.

    The first destination stays first (it is the user's chosen starting
    point); every following stop is the closest not-yet-visited destination
    to the previous one. Ties go to whichever comes first in the remaining
    pool. Destinations with unusable coordinates are infinitely far from
    everything, so they end up last in their original relative order.

    This is a heuristic, not a shortest-tour solver: O(n^2), no 2-opt.
    """
    destinations = list(destinations)
    n = len(destinations)
    # Reordering 0-2 stops cannot change a linear visit order
    if n < 3:
        return destinations

    matrix = distance_matrix_km([d.coordinate for d in destinations])

    route = [0]
    remaining = list(range(1, n))
    while remaining:
        current = route[-1]
        # np.argmin returns the first minimum, which keeps tie-breaking stable
        nearest = int(np.argmin(matrix[current, remaining]))
        route.append(remaining.pop(nearest))

    return [destinations[i] for i in route]


def optimize_itinerary(itinerary: Itinerary) -> Itinerary:
    """Returns a copy of ``itinerary`` with optimized order and recomputed metrics."""
    optimized = copy.deepcopy(itinerary)
    before = optimized.total_distance
    optimized.replace_destinations(optimize(optimized.destinations))
    logger.info("Optimized itinerary %s: %.2f km -> %.2f km",
                itinerary.id, before, optimized.total_distance)
    return optimized
