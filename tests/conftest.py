from typing import Any

import pytest

from tests.fakes import FakeSession, make_occasion


@pytest.fixture
def http() -> FakeSession:
    return FakeSession()


@pytest.fixture
def sample_occasion() -> dict[str, Any]:
    return make_occasion()
