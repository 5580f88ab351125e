import pytest

from journeycraft.data_models import Category, Coordinate, Location, PriceLevel


def make_location(name="Place", lat=0.0, lon=0.0, category=Category.ATTRACTION, **kwargs):
    return Location(name=name, coordinate=Coordinate(lat, lon), category=category, **kwargs)


class FakeDestinationSource:
    """Returns canned locations per category and records every query."""

    def __init__(self, by_category=None, fail_for=()):
        self.by_category = by_category or {}
        self.fail_for = set(fail_for)
        self.queries = []

    def nearby(self, category, radius, around):
        self.queries.append((category, radius, around))
        if category in self.fail_for:
            raise ConnectionError("lookup failed")
        if category is None:
            return [l for ls in self.by_category.values() for l in ls]
        return list(self.by_category.get(category, []))

    def search(self, query, near):
        return []


@pytest.fixture
def origin():
    return Coordinate(37.7749, -122.4194)


@pytest.fixture
def equator_stops():
    return [
        make_location("A", 0.0, 0.0, price_level=PriceLevel.FREE),
        make_location("B", 0.0, 1.0, price_level=PriceLevel.BUDGET),
        make_location("C", 0.0, 2.0, price_level=PriceLevel.LUXURY),
    ]


@pytest.fixture
def one_per_category():
    """One eco-friendly place per category, all at the same spot."""
    return {
        category: [make_location(f"{category.value} spot", 0.001, 0.001, category=category,
                                 is_eco_friendly=True)]
        for category in Category
    }
