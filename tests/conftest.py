"""Shared pytest fixtures for logfocus tests."""

import pytest
from pathlib import Path

from logfocus.core.config import CacheConfig, Config, LargeFileConfig
from logfocus.models.document import DocumentSnapshot


class FakeClock:
    """Manually advanced time source for cache TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    """Decoration sink that records the latest ranges per (document, filter)."""

    def __init__(self):
        self.calls = []
        self.latest = {}

    def set_decorations(self, document_id, filter_id, color, ranges):
        self.calls.append((document_id, filter_id, color, list(ranges)))
        self.latest[(document_id, filter_id)] = (color, list(ranges))

    def lines(self, document_id, filter_id):
        _, ranges = self.latest.get((document_id, filter_id), (None, []))
        return [r.start_line for r in ranges]


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def example_log(project_root):
    """Small application log shipped with the repository."""
    return project_root / "examples/app.log"


@pytest.fixture
def example_project(project_root):
    """Project file matching example_log."""
    return project_root / "examples/project.json"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def small_config():
    """Config with tiny limits so eviction and degraded mode are easy to reach."""
    return Config(
        cache=CacheConfig(max_entries=3, ttl_seconds=60),
        large_file=LargeFileConfig(
            size_threshold=1000,
            max_decoration_ranges=5,
            decoration_match_ceiling=10,
        ),
    )


@pytest.fixture
def log_doc():
    """Five-line document."""
    text = "\n".join([
        "INFO start",
        "ERROR disk full",
        "DEBUG tick",
        "ERROR network down",
        "INFO stop",
    ])
    return DocumentSnapshot(document_id="file:///var/log/app.log", text=text, version=1)


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: mark test as slow running")
