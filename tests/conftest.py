"""
Pytest configuration and fixtures for the hwtrack tests.
"""

import os

# Pin client settings before hwtrack.config reads the environment
os.environ["HWTRACK_BASE_URL"] = "https://assets.example.com"
os.environ["HWTRACK_API_KEY"] = "test-key"
os.environ["HWTRACK_COLLECTION"] = "issues"

import pytest  # noqa: E402

from hwtrack import mock  # noqa: E402
from hwtrack.mock import MockOptions, MockSession, RecordStore, load_snapshot  # noqa: E402
from tests.sample_assets import (  # noqa: E402
    TEST_API_KEY,
    fixed_clock,
    get_sample_assets,
    sample_document,
    write_dataset,
)


@pytest.fixture
def sample_assets():
    """Provide sample asset data."""
    return get_sample_assets()


@pytest.fixture
def dataset_path(tmp_path):
    """Write the sample dataset to a temporary file."""
    return write_dataset(tmp_path / "assets.json", sample_document())


@pytest.fixture
def snapshot(dataset_path):
    return load_snapshot(dataset_path)


@pytest.fixture
def store(snapshot):
    """Provide a record store over the sample snapshot with a fixed clock."""
    return RecordStore(snapshot.records, clock=fixed_clock)


@pytest.fixture
def mock_options():
    return MockOptions(api_key=TEST_API_KEY, clock=fixed_clock)


@pytest.fixture
def session(dataset_path, mock_options):
    """Provide a mock session that is not intercepting requests."""
    return MockSession.from_file(dataset_path, mock_options)


@pytest.fixture
def session_active(session):
    """
    Provide an intercepting mock session.

    The interception is automatically started and stopped.
    """
    with session:
        yield session


@pytest.fixture
def enabled_mock(dataset_path, mock_options):
    """Enable the process-wide mock and disable it after the test."""
    active = mock.enable(dataset_path, mock_options)
    yield active
    mock.disable()
