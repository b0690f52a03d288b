import pytest

from celebrations.queue import CelebrationQueue
from repositories.cursor_repository import MemoryCursorRepository
from tests.fakes import FakeAwardBackend


@pytest.fixture
def award_backend():
    return FakeAwardBackend()


@pytest.fixture
def cursor_store():
    return MemoryCursorRepository()


@pytest.fixture
def celebrations():
    return CelebrationQueue()
