import pytest

from conftest import FakeDestinationSource, make_location
from journeycraft.data_models import Category, InterestCategory, TravelStyle, UserPreferences
from journeycraft.recommendation_engine import (
    TimeSlot,
    filter_by_preferences,
    preferred_categories,
    rank_by_similarity,
    select_activity,
)


def prefs(*interests, style=TravelStyle.BALANCED, eco=False):
    return UserPreferences(travel_style=style, interests=frozenset(interests), eco_friendly_mode=eco)


@pytest.mark.parametrize("slot, interests, expected", [
    (TimeSlot.MORNING, [], [Category.NATURE, Category.MUSEUM, Category.ATTRACTION]),
    (TimeSlot.MORNING, [InterestCategory.ART, InterestCategory.NATURE], [Category.NATURE, Category.MUSEUM]),
    (TimeSlot.MORNING, [InterestCategory.FOOD], [Category.NATURE, Category.MUSEUM, Category.ATTRACTION]),
    (TimeSlot.LUNCH, [InterestCategory.NATURE], [Category.RESTAURANT]),
    (TimeSlot.AFTERNOON, [], [Category.ATTRACTION, Category.SHOPPING, Category.MUSEUM]),
    (TimeSlot.AFTERNOON, [InterestCategory.HISTORY, InterestCategory.ART], [Category.MUSEUM, Category.MUSEUM]),
    (TimeSlot.AFTERNOON, [InterestCategory.SHOPPING, InterestCategory.ART], [Category.SHOPPING, Category.MUSEUM]),
    (TimeSlot.EVENING, [InterestCategory.FOOD], [Category.RESTAURANT]),
    (TimeSlot.EVENING, [InterestCategory.NIGHTLIFE], [Category.ENTERTAINMENT]),
    (TimeSlot.EVENING, [InterestCategory.SPORTS], [Category.ENTERTAINMENT, Category.RESTAURANT]),
])
def test_preferred_categories(slot, interests, expected):
    assert preferred_categories(slot, prefs(*interests)) == expected


def test_filter_by_preferences():
    park = make_location("Park", category=Category.NATURE, is_eco_friendly=True)
    grill = make_location("Grill", category=Category.RESTAURANT, is_eco_friendly=False)
    spa = make_location("Spa", category=Category.WELLNESS, is_eco_friendly=True)
    places = [park, grill, spa]

    assert filter_by_preferences(places, prefs()) == places
    assert filter_by_preferences(places, prefs(eco=True)) == [park, spa]
    assert filter_by_preferences(places, prefs(style=TravelStyle.CULTURAL)) == []
    assert filter_by_preferences(places, prefs(style=TravelStyle.RELAXATION)) == [park, spa]


def test_select_activity_returns_none_when_nothing_survives(origin):
    source = FakeDestinationSource({
        Category.RESTAURANT: [make_location("Grill", category=Category.RESTAURANT)],
    })
    assert select_activity(TimeSlot.LUNCH, prefs(eco=True), origin, source, lambda c: c[0]) is None


def test_select_activity_only_chooses_from_one_category(origin):
    seen = []
    nature = [make_location("Park", category=Category.NATURE)]
    museums = [make_location("Museum", category=Category.MUSEUM)]
    source = FakeDestinationSource({Category.NATURE: nature, Category.MUSEUM: museums})

    def chooser(candidates):
        seen.append(list(candidates))
        return candidates[0]

    picked = select_activity(TimeSlot.MORNING, prefs(), origin, source, chooser)

    assert picked is nature[0]
    assert seen == [nature]
    assert [q[0] for q in source.queries] == [Category.NATURE]


def test_rank_by_similarity_orders_best_match_first():
    places = [
        make_location("Harbour Grill", description="steak and seafood by the water"),
        make_location("Sushi Bar", description="fresh seafood and sushi rolls, seafood platters"),
        make_location("Bookshop", description="second hand books"),
    ]
    ranked = rank_by_similarity("seafood sushi", places)
    assert [l.name for l in ranked] == ["Sushi Bar", "Harbour Grill", "Bookshop"]


def test_rank_by_similarity_with_no_overlap_keeps_order():
    places = [make_location("A"), make_location("B")]
    assert rank_by_similarity("!!", places) == places
    assert rank_by_similarity("anything", places[:1]) == places[:1]
