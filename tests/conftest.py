"""Pytest configuration and fixtures for closet-filter tests."""

from datetime import datetime

import pytest

from closet_filter.filters.manager import FilterManager
from closet_filter.models.item import Item
from closet_filter.services.search import ItemSearchService
from closet_filter.store.cache import TTLCache
from closet_filter.store.repository import ItemRepository


@pytest.fixture
def repository():
    """Empty in-memory item store."""
    repo = ItemRepository.in_memory()
    yield repo
    repo.close()


@pytest.fixture
def sample_items():
    """Items A, B and C, newest first."""
    return {
        "A": Item(size=100, color="red", category="shirt", note="linen", created_at=datetime(2024, 3, 3, 9, 0)),
        "B": Item(size=100, color="blue", category="shirt", note="oxford", created_at=datetime(2024, 3, 2, 9, 0)),
        "C": Item(size=110, color="red", category="pants", note="wool blend", created_at=datetime(2024, 3, 1, 9, 0)),
    }


@pytest.fixture
def seeded_repository(repository, sample_items):
    """In-memory store holding A, B and C."""
    repository.insert_many([sample_items["A"], sample_items["B"], sample_items["C"]])
    return repository


@pytest.fixture
def item_ids(seeded_repository):
    """Map of item label to stored id."""
    labels = {("red", "shirt"): "A", ("blue", "shirt"): "B", ("red", "pants"): "C"}
    return {
        labels[(item.color, item.category)]: item.id
        for item in seeded_repository.find(FilterManager().get_current_state())
    }


@pytest.fixture
def search_service(seeded_repository):
    return ItemSearchService(seeded_repository, cache=TTLCache(maxsize=16, ttl=60))


@pytest.fixture
def manager():
    return FilterManager()


@pytest.fixture
def labels(item_ids):
    """Translate a list of items back to their A/B/C labels, keeping order."""
    by_id = {item_id: label for label, item_id in item_ids.items()}

    def _labels(items):
        return [by_id[item.id] for item in items]

    return _labels
