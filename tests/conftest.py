"""Shared fixtures for store and engine tests."""

from __future__ import annotations

import pytest

from medimate.app_services import FileStorage, MemoryStorage, UserStore


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> UserStore:
    """Loaded store over empty in-memory storage."""
    user_store = UserStore(storage)
    user_store.load()
    return user_store


@pytest.fixture
def file_storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "storage")


@pytest.fixture
def neutral_skin_answers() -> dict:
    """Answers that trigger no score penalty and no skin-type override."""
    return {
        1: "Normal",
        2: [],
        3: "Rarely (once a month)",
        4: "Normal/comfortable",
        5: "No reaction",
        6: "Simple (cleanser + moisturizer)",
        7: "1-2 hours",
        8: "Daily",
        9: "5",
        10: "7-8 hours",
        11: "6-8 glasses",
        12: "26-35",
        13: "General maintenance",
    }
