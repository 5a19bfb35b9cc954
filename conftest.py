"""
Shared fixtures for the URL scraper tests.

No test touches the network: fetchers are built with a session factory that
hands out a MagicMock session returning real requests.Response objects.
"""

from unittest.mock import MagicMock

import pytest
import requests

from url_scraper.fetcher import Fetcher
from url_scraper.history import HistoryStore


def make_response(
    body=b"<html><body><h1>Hi</h1></body></html>",
    status: int = 200,
    reason: str = "OK",
    content_type: str = "text/html; charset=utf-8",
    url: str = "https://example.com/",
) -> requests.Response:
    """Build a real Response without any I/O."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = body
    # Body already "downloaded": iter_content() slices _content, raw is never read
    response._content_consumed = True
    response.url = url
    if content_type:
        response.headers["Content-Type"] = content_type
    return response


@pytest.fixture
def session():
    """Mock HTTP session; set session.get.return_value / side_effect per test."""
    mock = MagicMock()
    mock.get.return_value = make_response()
    return mock


@pytest.fixture
def session_factory(session):
    return MagicMock(return_value=session)


@pytest.fixture
def fetcher(session_factory):
    return Fetcher(session_factory=session_factory)


@pytest.fixture
def history(tmp_path):
    store = HistoryStore(f"sqlite:///{tmp_path / 'history.db'}")
    yield store
    store.close()
