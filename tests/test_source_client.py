"""Tests for the GitHub contents client."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from models import MAX_FILE_SIZE, NodeKind
from repo_analyzer.errors import FetchError, RateLimitExceeded, RepositoryNotFound
from repo_analyzer.rate_limiter import RateLimiter
from repo_analyzer.source_client import GitHubContentsClient


def make_response(status_code=200, payload=None, headers=None, body=None):
    response = requests.Response()
    response.status_code = status_code
    if payload is not None:
        body = json.dumps(payload)
    response._content = (body or "").encode("utf-8")
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    response.url = "https://api.github.com/repos/acme/widgets/contents/"
    return response


LISTING = [
    {
        "name": "readme.txt",
        "path": "readme.txt",
        "type": "file",
        "size": 10,
        "download_url": "https://raw.githubusercontent.com/acme/widgets/main/readme.txt",
    },
    {
        "name": "src",
        "path": "src",
        "type": "dir",
        "size": 0,
        "download_url": None,
    },
]


@pytest.fixture
def client():
    return GitHubContentsClient(token="test-token", timeout=5)


def test_init_sets_headers(client):
    assert client.session.headers["Authorization"] == "token test-token"
    assert client.session.headers["Accept"] == "application/vnd.github.v3+json"


def test_init_without_token_has_no_authorization():
    client = GitHubContentsClient()
    assert "Authorization" not in client.session.headers


def test_list_directory_parses_entries(client):
    with patch.object(client.session, "get", return_value=make_response(payload=LISTING)) as mock_get:
        entries = client.list_directory("acme", "widgets", "")

    mock_get.assert_called_once_with("https://api.github.com/repos/acme/widgets/contents/", timeout=5)
    assert [e.name for e in entries] == ["readme.txt", "src"]
    readme, src = entries
    assert readme.kind == NodeKind.FILE
    assert readme.size == 10
    assert readme.download_ref.endswith("/readme.txt")
    assert src.kind == NodeKind.DIRECTORY
    assert src.is_directory


def test_list_directory_wraps_single_file(client):
    with patch.object(client.session, "get", return_value=make_response(payload=LISTING[0])):
        entries = client.list_directory("acme", "widgets", "readme.txt")

    assert len(entries) == 1
    assert entries[0].name == "readme.txt"


def test_list_directory_uses_nested_path(client):
    with patch.object(client.session, "get", return_value=make_response(payload=[])) as mock_get:
        client.list_directory("acme", "widgets", "src/pkg")

    assert mock_get.call_args.args[0] == "https://api.github.com/repos/acme/widgets/contents/src/pkg"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("lang/C#", "lang/C%23"),
        ("docs/my notes", "docs/my%20notes"),
        ("what?/now", "what%3F/now"),
        ("100%", "100%25"),
    ],
)
def test_list_directory_encodes_path(client, path, expected):
    with patch.object(client.session, "get", return_value=make_response(payload=[])) as mock_get:
        client.list_directory("acme", "widgets", path)

    url = mock_get.call_args.args[0]
    assert url == f"https://api.github.com/repos/acme/widgets/contents/{expected}"
    assert requests.Request("GET", url).prepare().url == url


def test_contents_url_encodes_owner_and_repository():
    url = GitHubContentsClient.contents_url("ac/me", "wid#gets", "")

    assert url == "https://api.github.com/repos/ac%2Fme/wid%23gets/contents/"


@pytest.mark.parametrize("payload", [{"message": "weird"}, [{"path": "x", "type": "file"}], ["readme.txt"]])
def test_malformed_listing_item_is_fetch_error(client, payload):
    with patch.object(client.session, "get", return_value=make_response(payload=payload)):
        with pytest.raises(FetchError, match="unexpected listing item"):
            client.list_directory("acme", "widgets", "src")


def test_not_found(client):
    with patch.object(client.session, "get", return_value=make_response(404, {"message": "Not Found"})):
        with pytest.raises(RepositoryNotFound) as exc_info:
            client.list_directory("acme", "missing", "")

    assert exc_info.value.status_code == 404
    assert isinstance(exc_info.value, FetchError)


@pytest.mark.parametrize(
    "status_code, headers, payload",
    [
        (403, {"X-RateLimit-Remaining": "0", "X-RateLimit-Limit": "60", "X-RateLimit-Reset": "0"}, {"message": "x"}),
        (403, {"Retry-After": "60"}, {"message": "You have exceeded a secondary rate limit"}),
        (403, {}, {"message": "API rate limit exceeded for 1.2.3.4"}),
        (429, {}, {"message": "Too Many Requests"}),
    ],
)
def test_rate_limited(client, status_code, headers, payload):
    response = make_response(status_code, payload, headers=headers)
    with patch.object(client.session, "get", return_value=response):
        with pytest.raises(RateLimitExceeded):
            client.list_directory("acme", "widgets", "")


def test_forbidden_without_rate_limit_is_plain_fetch_error(client):
    response = make_response(403, {"message": "Repository access blocked"})
    with patch.object(client.session, "get", return_value=response):
        with pytest.raises(FetchError) as exc_info:
            client.list_directory("acme", "widgets", "")

    assert not isinstance(exc_info.value, RateLimitExceeded)
    assert exc_info.value.status_code == 403


def test_server_error(client):
    with patch.object(client.session, "get", return_value=make_response(502, body="bad gateway")):
        with pytest.raises(FetchError) as exc_info:
            client.list_directory("acme", "widgets", "src")

    assert exc_info.value.status_code == 502
    assert exc_info.value.path == "src"


def test_timeout_becomes_fetch_error(client):
    with patch.object(client.session, "get", side_effect=requests.Timeout("read timed out")):
        with pytest.raises(FetchError, match="read timed out"):
            client.list_directory("acme", "widgets", "")


def test_invalid_json_becomes_fetch_error(client):
    with patch.object(client.session, "get", return_value=make_response(body="<html>")):
        with pytest.raises(FetchError, match="invalid JSON"):
            client.list_directory("acme", "widgets", "")


def test_rate_limit_headers_are_tracked():
    limiter = RateLimiter(buffer=10)
    client = GitHubContentsClient(rate_limiter=limiter)
    headers = {"X-RateLimit-Remaining": "4999", "X-RateLimit-Limit": "5000", "X-RateLimit-Reset": "1700000000"}

    with patch.object(client.session, "get", return_value=make_response(payload=[], headers=headers)):
        client.list_directory("acme", "widgets", "")

    assert limiter.get_remaining_requests() == 4999


def test_waits_on_rate_limiter_before_each_request():
    limiter = MagicMock(spec=RateLimiter)
    client = GitHubContentsClient(rate_limiter=limiter)

    with patch.object(client.session, "get", return_value=make_response(payload=[])):
        client.list_directory("acme", "widgets", "")

    limiter.wait_if_needed.assert_called_once()


def test_fetch_file_content(client):
    url = "https://raw.githubusercontent.com/acme/widgets/main/readme.txt"
    with patch.object(client.session, "get", return_value=make_response(body="hello world")) as mock_get:
        content = client.fetch_file_content(url)

    assert content == "hello world"
    mock_get.assert_called_once_with(url, timeout=5)


def test_fetch_file_content_requires_url(client):
    with pytest.raises(FetchError, match="required"):
        client.fetch_file_content("")


def test_fetch_file_content_rejects_oversized(client):
    with patch.object(client.session, "get", return_value=make_response(body="x" * MAX_FILE_SIZE)):
        with pytest.raises(FetchError, match="exceeds"):
            client.fetch_file_content("https://raw.example/big.bin")
