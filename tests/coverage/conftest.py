"""Fixtures for coverage engine tests."""

import pytest
from fakes import FakeLocator, RecordingContext


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator()


@pytest.fixture
def context() -> RecordingContext:
    return RecordingContext()
