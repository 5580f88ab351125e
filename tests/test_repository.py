import json
from pathlib import Path

import pytest

from conftest import make_location
from journeycraft.data_models import TravelStyle
from journeycraft.itinerary import Itinerary
from journeycraft.repository import (
    ITINERARIES_KEY,
    ItineraryRepository,
    JsonFileStore,
    MemoryStore,
    RepositoryError,
)


class FailingStore(MemoryStore):
    """Accepts writes until ``failing`` is switched on."""

    def __init__(self, failing=True):
        super().__init__()
        self.failing = failing

    def set(self, key, value):
        if self.failing:
            raise OSError("disk full")
        super().set(key, value)

    def remove(self, key):
        if self.failing:
            raise OSError("disk full")
        super().remove(key)


@pytest.fixture
def repo():
    return ItineraryRepository(MemoryStore())


@pytest.fixture
def sample(equator_stops):
    return Itinerary(title="Equator Ride", destinations=equator_stops, tags=["cycling"])


def test_add_and_get(repo, sample):
    returned = repo.add(sample)
    assert returned is sample

    stored = repo.get(sample.id)
    assert stored is not sample
    assert stored.to_dict() == sample.to_dict()
    assert repo.get("nope") is None


def test_stored_itineraries_are_private_copies(repo, sample):
    repo.add(sample)
    sample.add_destination(make_location("Sneaky"))
    assert len(repo.get(sample.id).destinations) == 3

    fetched = repo.get(sample.id)
    fetched.title = "Changed"
    assert repo.get(sample.id).title == "Equator Ride"


def test_update(repo, sample):
    repo.add(sample)
    sample.remove_destination_at(0)
    assert repo.update(sample) is True
    assert [d.name for d in repo.get(sample.id).destinations] == ["B", "C"]


def test_update_unknown_id_is_ignored(repo, sample):
    assert repo.update(sample) is False
    assert repo.list() == []


def test_delete(repo, sample):
    repo.add(sample)
    assert repo.delete(sample.id) is True
    assert repo.delete(sample.id) is False
    assert repo.list() == []


def test_duplicate(repo, sample):
    repo.add(sample)
    copy = repo.duplicate(sample)
    assert copy.id != sample.id
    assert copy.title == "Equator Ride (Copy)"
    assert {i.id for i in repo.list()} == {sample.id, copy.id}


def test_search(repo, sample):
    repo.add(sample)
    repo.add(Itinerary(title="City Break", description="Museums and cafés",
                       destinations=[make_location("Louvre")]))

    assert [i.title for i in repo.search("equator")] == ["Equator Ride"]
    assert [i.title for i in repo.search("MUSEUM")] == ["City Break"]
    assert [i.title for i in repo.search("cycling")] == ["Equator Ride"]
    assert [i.title for i in repo.search("louvre")] == ["City Break"]
    assert len(repo.search("")) == 2
    assert repo.search("zzz") == []


def test_filter_by_style_and_eco(repo, sample):
    heavy = Itinerary(title="Long Haul", travel_style=TravelStyle.ADVENTURE,
                      destinations=[make_location("Base", 0, 0), make_location("Summit", 0, 5)])
    repo.add(sample)
    repo.add(heavy)

    assert [i.title for i in repo.filter_by_style(TravelStyle.ADVENTURE)] == ["Long Haul"]
    assert len(repo.filter_by_style(None)) == 2
    assert [i.title for i in repo.eco_friendly()] == ["Equator Ride"]


def test_clear_all(repo, sample):
    repo.add(sample)
    repo.clear_all()
    assert repo.list() == []


def test_save_failure_raises_repository_error(sample):
    repo = ItineraryRepository(FailingStore())
    with pytest.raises(RepositoryError):
        repo.add(sample)
    assert repo.list() == []


def test_failed_writes_leave_repository_unchanged(sample):
    store = FailingStore(failing=False)
    repo = ItineraryRepository(store)
    repo.add(sample)
    store.failing = True

    edited = repo.get(sample.id)
    edited.title = "Renamed"
    with pytest.raises(RepositoryError):
        repo.update(edited)
    with pytest.raises(RepositoryError):
        repo.delete(sample.id)
    with pytest.raises(RepositoryError):
        repo.add(Itinerary(title="Another"))
    with pytest.raises(RepositoryError):
        repo.clear_all()

    assert [i.title for i in repo.list()] == ["Equator Ride"]
    assert [i.title for i in ItineraryRepository(store).list()] == ["Equator Ride"]


def test_json_file_store_keeps_cache_in_sync_when_write_fails(tmp_path, monkeypatch):
    path = tmp_path / "kv.json"
    store = JsonFileStore(path)
    store.set("a", "1")

    def refuse(self, target):
        raise OSError("read-only file system")

    monkeypatch.setattr(Path, "replace", refuse)
    with pytest.raises(OSError):
        store.set("b", "2")
    with pytest.raises(OSError):
        store.remove("a")

    assert store.get("a") == "1"
    assert store.get("b") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1"}


def test_undecodable_payload_starts_empty():
    store = MemoryStore()
    store.set(ITINERARIES_KEY, '[{"title": "No dates", "destinations": [{"name": "x"}]}]')
    assert ItineraryRepository(store).list() == []


def test_json_file_store_persists_across_instances(tmp_path, sample):
    path = tmp_path / "state" / "itineraries.json"
    ItineraryRepository(JsonFileStore(path)).add(sample)

    assert path.exists()
    assert ITINERARIES_KEY in json.loads(path.read_text(encoding="utf-8"))

    reloaded = ItineraryRepository(JsonFileStore(path)).get(sample.id)
    assert reloaded.title == "Equator Ride"
    assert reloaded.total_distance == pytest.approx(sample.total_distance)
    assert reloaded.start_date == sample.start_date
    assert [d.id for d in reloaded.destinations] == [d.id for d in sample.destinations]


def test_json_file_store_moves_corrupted_file_aside(tmp_path):
    path = tmp_path / "itineraries.json"
    path.write_text("{not json", encoding="utf-8")

    repo = ItineraryRepository(JsonFileStore(path))

    assert repo.list() == []
    assert (tmp_path / "itineraries.json.broken").read_text(encoding="utf-8") == "{not json"


def test_json_file_store_remove(tmp_path):
    store = JsonFileStore(tmp_path / "kv.json")
    store.set("a", "1")
    store.remove("a")
    store.remove("missing")
    assert JsonFileStore(tmp_path / "kv.json").get("a") is None
