import pytest

from api.schemas.location import Location
from api.services.errors import InvalidCoordinatesError
from api.services.location_book import InMemoryKeyValueStore, LocationBook


PARIS = Location(latitude=48.8566, longitude=2.3522, timezone="Europe/Paris")


def test_save_get_delete():
    book = LocationBook()
    book.save("paris", PARIS)
    assert book.get("paris") == PARIS
    assert book.list() == [("paris", PARIS)]
    assert book.delete("paris") is True
    assert book.get("paris") is None
    assert book.delete("paris") is False


def test_observers_receive_changes_until_unsubscribed():
    book = LocationBook(InMemoryKeyValueStore())
    seen = []
    unsubscribe = book.subscribe(lambda name, loc: seen.append((name, loc)))
    book.save("paris", PARIS)
    book.delete("paris")
    unsubscribe()
    book.save("paris", PARIS)
    assert seen == [("paris", PARIS), ("paris", None)]


def test_failing_observer_does_not_block_others():
    book = LocationBook()
    seen = []

    def broken(name, loc):
        raise RuntimeError("boom")

    book.subscribe(broken)
    book.subscribe(lambda name, loc: seen.append(name))
    book.save("paris", PARIS)
    assert seen == ["paris"]


def test_invalid_coordinates_rejected():
    book = LocationBook()
    bad = Location.model_construct(latitude=95.0, longitude=0.0, elevation=None, timezone=None)
    with pytest.raises(InvalidCoordinatesError):
        book.save("nowhere", bad)


def test_current_location_from_provider():
    class Fixed:
        def current_location(self):
            return PARIS

    assert LocationBook(provider=Fixed()).current() == PARIS
    assert LocationBook().current() is None
