import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SIMULATED_LATENCY", "0")

import pytest

from database import LatencyPolicy, MemoryStore, Repository


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repo(store):
    return Repository(store, LatencyPolicy(scale=0), seed_demo_bookings=False)


@pytest.fixture
def offline_repo():
    return Repository(None, LatencyPolicy(scale=0))
