"""
Shared fixtures for the bulk-upload tests.
"""
import pytest
from fastapi.testclient import TestClient

from content_ingest.main import app
from content_ingest.services.content_store import ContentTable, InMemoryContentStore
from content_ingest.services.store_provider import get_content_store


def add_chapter(store, number, title=None):
    return store.create(ContentTable.CHAPTER, {
        "chapter_number": number,
        "title_en": title or f"Chapter {number}",
        "title_mr": None,
        "is_active": True,
        "display_in_app": True,
    })


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryContentStore()


@pytest.fixture
def seeded_store(store):
    """Store holding chapters 1, 2 and 3."""
    for number in (1, 2, 3):
        add_chapter(store, number)
    return store


@pytest.fixture
def client(seeded_store):
    """Test client wired to the seeded store."""
    app.dependency_overrides[get_content_store] = lambda: seeded_store
    yield TestClient(app)
    app.dependency_overrides.clear()
