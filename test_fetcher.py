"""Tests for the Fetcher and its configuration."""

import pytest
import requests
from pydantic import ValidationError

from conftest import make_response
from url_scraper.config import ScraperConfig
from url_scraper.exceptions import (
    ErrorKind,
    FetchTimeoutError,
    InvalidURLError,
    NoResponseError,
    ServerError,
    UnknownFetchError,
)
from url_scraper.fetcher import Fetcher, is_valid_url


@pytest.mark.parametrize("url", [
    "example.com",
    "www.example.com/page",
    "ftp://example.com/file",
    "http://",
    "https://",
    " https://example.com",
    "",
    None,
])
def test_invalid_url_makes_no_request(fetcher, session_factory, url):
    with pytest.raises(InvalidURLError) as excinfo:
        fetcher.fetch(url)
    assert excinfo.value.kind is ErrorKind.INVALID_URL
    session_factory.assert_not_called()


@pytest.mark.parametrize("url", ["http://example.com", "https://example.com/a?b=c", "https://x"])
def test_valid_urls(url):
    assert is_valid_url(url)


def test_fetch_returns_page(fetcher, session):
    page = fetcher.fetch("https://example.com/")

    assert page.status_code == 200
    assert page.reason == "OK"
    assert page.html == "<html><body><h1>Hi</h1></body></html>"
    assert page.charset == "utf-8"
    session.close.assert_called_once()


def test_request_uses_configured_headers_timeout_and_redirects(fetcher, session):
    fetcher.fetch("https://example.com/")

    args, kwargs = session.get.call_args
    assert args == ("https://example.com/",)
    assert kwargs["timeout"] == 20.0
    assert kwargs["allow_redirects"] is True
    assert kwargs["stream"] is True
    headers = kwargs["headers"]
    assert headers["User-Agent"].startswith("Mozilla/5.0")
    assert headers["Accept"].startswith("text/html")
    assert headers["Accept-Language"] == "ja,en-US;q=0.7,en;q=0.3"
    assert headers["Cache-Control"] == "no-cache"
    assert headers["Pragma"] == "no-cache"
    assert session.max_redirects == 5


def test_custom_config_is_applied(session, session_factory):
    config = ScraperConfig(timeout=3.5, max_redirects=1, user_agent="TestAgent/1.0")
    Fetcher(config, session_factory=session_factory).fetch("http://example.com")

    kwargs = session.get.call_args.kwargs
    assert kwargs["timeout"] == 3.5
    assert kwargs["headers"]["User-Agent"] == "TestAgent/1.0"
    assert session.max_redirects == 1


def test_final_url_after_redirect_is_reported(fetcher, session):
    session.get.return_value = make_response(url="https://example.com/moved")
    assert fetcher.fetch("https://example.com/old").url == "https://example.com/moved"


def test_client_error_is_a_successful_fetch(fetcher, session):
    session.get.return_value = make_response(b"<p>gone</p>", status=404, reason="Not Found")
    page = fetcher.fetch("https://example.com/missing")
    assert (page.status_code, page.reason) == (404, "Not Found")
    assert page.html == "<p>gone</p>"


@pytest.mark.parametrize("status,reason", [(500, "Internal Server Error"), (503, "Service Unavailable")])
def test_server_error_raises(fetcher, session, status, reason):
    session.get.return_value = make_response(status=status, reason=reason)
    with pytest.raises(ServerError) as excinfo:
        fetcher.fetch("https://example.com/")
    assert (excinfo.value.status, excinfo.value.status_text) == (status, reason)
    assert excinfo.value.kind is ErrorKind.SERVER_ERROR
    session.close.assert_called_once()


@pytest.mark.parametrize("error,expected", [
    (requests.ReadTimeout("read timed out"), FetchTimeoutError),
    (requests.ConnectTimeout("connect timed out"), FetchTimeoutError),
    (requests.ConnectionError("Name or service not known"), NoResponseError),
    (requests.TooManyRedirects("Exceeded 5 redirects."), UnknownFetchError),
    (requests.exceptions.InvalidURL("bad host"), UnknownFetchError),
])
def test_transport_errors_are_classified(fetcher, session, error, expected):
    session.get.side_effect = error
    with pytest.raises(expected) as excinfo:
        fetcher.fetch("https://example.com/")
    assert excinfo.value.url == "https://example.com/"
    assert excinfo.value.__cause__ is error
    session.close.assert_called_once()


def slow_drip(clock, step=0.4, chunks=10):
    """iter_content stand-in: one byte per chunk, advancing a fake clock."""
    def iter_content(chunk_size=1):
        for _ in range(chunks):
            clock[0] += step
            yield b"x"
    return iter_content


def test_slow_body_hits_the_whole_fetch_deadline(monkeypatch, session, session_factory):
    clock = [100.0]
    monkeypatch.setattr("url_scraper.fetcher.time.monotonic", lambda: clock[0])
    response = make_response()
    response.iter_content = slow_drip(clock)
    session.get.return_value = response

    fetcher = Fetcher(ScraperConfig(timeout=1.0), session_factory=session_factory)
    with pytest.raises(FetchTimeoutError) as excinfo:
        fetcher.fetch("https://slow.example.com/")

    assert excinfo.value.kind is ErrorKind.TIMEOUT
    # Gave up on the third byte (1.2s), not after all ten (4.0s)
    assert clock[0] == pytest.approx(101.2)
    session.close.assert_called_once()


def test_body_within_deadline_is_read_in_full(monkeypatch, session, session_factory):
    clock = [0.0]
    monkeypatch.setattr("url_scraper.fetcher.time.monotonic", lambda: clock[0])
    response = make_response()
    response.iter_content = slow_drip(clock, step=0.1, chunks=5)
    session.get.return_value = response

    page = Fetcher(ScraperConfig(timeout=1.0), session_factory=session_factory).fetch("https://example.com/")
    assert page.html == "xxxxx"


def test_charset_from_meta_when_header_has_none(fetcher, session):
    body = '<html><head><meta charset="Shift_JIS"></head><body><p>日本語</p></body></html>'
    session.get.return_value = make_response(body.encode("shift_jis"), content_type="text/html")

    page = fetcher.fetch("https://example.jp/")
    assert page.charset == "shift_jis"
    assert "日本語" in page.html


def test_header_charset_uses_browser_mapping(fetcher, session):
    # 0x93/0x94 are curly quotes in windows-1252, control codes in iso-8859-1
    session.get.return_value = make_response(
        b"<p>\x93quoted\x94</p>", content_type="text/html; charset=ISO-8859-1"
    )
    page = fetcher.fetch("https://example.com/")
    assert page.charset == "windows-1252"
    assert page.html == "<p>“quoted”</p>"


# --- Configuration ---

def test_config_defaults():
    config = ScraperConfig.from_env({})
    assert config.timeout == 20.0
    assert config.max_redirects == 5
    assert config.db_url == "sqlite:///scraping_history.db"
    assert config.history_limit == 50


def test_config_from_env():
    config = ScraperConfig.from_env({
        "URL_SCRAPER_TIMEOUT": "7.5",
        "URL_SCRAPER_MAX_REDIRECTS": "2",
        "URL_SCRAPER_DB_URL": "sqlite:///other.db",
        "URL_SCRAPER_LOG_LEVEL": "DEBUG",
        "UNRELATED": "ignored",
    })
    assert config.timeout == 7.5
    assert config.max_redirects == 2
    assert config.db_url == "sqlite:///other.db"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("name,value", [
    ("URL_SCRAPER_TIMEOUT", "soon"),
    ("URL_SCRAPER_TIMEOUT", "0"),
    ("URL_SCRAPER_MAX_REDIRECTS", "-1"),
    ("URL_SCRAPER_LOG_LEVEL", "chatty"),
])
def test_config_rejects_bad_values(name, value):
    with pytest.raises(ValidationError):
        ScraperConfig.from_env({name: value})
