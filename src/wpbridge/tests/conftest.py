"""
Shared fixtures and utilities for wpbridge tests.

Fixtures are trimmed copies of real WordPress REST responses stored in fixtures/.
HTTP is mocked at aiohttp.ClientSession; queue responses on `mock_http`.
"""

# Set environment to test mode FIRST, before any imports
import os

os.environ["ENVIRONMENT"] = "test"

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from wpbridge.auth import BasicAuthCredentials


def pytest_configure(config):
    """Pytest hook to configure test environment before any tests run."""
    os.environ["ENVIRONMENT"] = "test"


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(filename: str):
    """Load a fixture from JSON file.

    Raises:
        FileNotFoundError: If fixture file doesn't exist
    """
    fixture_path = FIXTURES_DIR / filename
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture file not found: {fixture_path}")

    with open(fixture_path) as f:
        return json.load(f)


def make_response(data=None, status=200, reason="OK", headers=None, cookies=None, text=None):
    """A stand-in for aiohttp.ClientResponse."""
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.headers = headers or {}
    response.cookies = cookies or {}
    response.json = AsyncMock(return_value=data)
    response.text = AsyncMock(return_value=text if text is not None else json.dumps(data))
    return response


@pytest.fixture
def fixture_loader():
    return load_fixture


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def mock_http():
    """Patch aiohttp.ClientSession and return the session mock.

    Set responses with:
        mock_http.request.return_value.__aenter__.return_value = response
        mock_http.request.return_value.__aenter__.side_effect = [r1, r2]
    """
    with patch("aiohttp.ClientSession") as mock_session_class:
        mock_session = MagicMock()
        mock_session.__aenter__.return_value = mock_session
        mock_session.__aexit__.return_value = False
        mock_session_class.return_value = mock_session
        yield mock_session


@pytest.fixture
def base_url():
    return "https://example.com"


@pytest.fixture
def basic_credentials():
    return BasicAuthCredentials(username="admin", password="abcd efgh ijkl mnop")


@pytest.fixture
def posts_data():
    return load_fixture("posts.json")


@pytest.fixture
def pages_data():
    return load_fixture("pages.json")


@pytest.fixture
def media_data():
    return load_fixture("media.json")


@pytest.fixture
def categories_data():
    return load_fixture("categories.json")


@pytest.fixture
def tags_data():
    return load_fixture("tags.json")


@pytest.fixture
def users_data():
    return load_fixture("users.json")


@pytest.fixture
def settings_data():
    return load_fixture("settings.json")


@pytest.fixture
def wp_error_data():
    return load_fixture("wp_error.json")
