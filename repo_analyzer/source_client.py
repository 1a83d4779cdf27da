"""
GitHub contents API client.

Lists repository directories and downloads raw file content without cloning.
"""

import logging
from typing import List, Optional, Any
from urllib.parse import quote

import requests

from models import ListingEntry, NodeKind, MAX_FILE_SIZE
from repo_analyzer.errors import FetchError, RateLimitExceeded, RepositoryNotFound
from repo_analyzer.rate_limiter import RateLimiter


logger = logging.getLogger(__name__)


class GitHubContentsClient:
    """
    Source client backed by the GitHub REST contents endpoint.

    Every failure surfaces as a FetchError subclass:
    - RepositoryNotFound for 404
    - RateLimitExceeded for 403/429 caused by rate limiting
    - FetchError for anything else, including timeouts
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize contents client.

        Args:
            token: GitHub personal access token (optional, increases rate limit)
            rate_limiter: RateLimiter instance (optional)
            timeout: Per-request timeout in seconds
            session: Preconfigured requests.Session (optional)
        """
        self.token = token
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/vnd.github.v3+json"})

        if token:
            self.session.headers.update({"Authorization": f"token {token}"})

    def list_directory(self, owner: str, repository: str, path: str = "") -> List[ListingEntry]:
        """
        List the entries under a repository path.

        Args:
            owner: Repository owner
            repository: Repository name
            path: Repository-relative directory path (empty for root)

        Returns:
            Entries in upstream listing order

        Raises:
            FetchError: If the listing cannot be retrieved
        """
        self.rate_limiter.wait_if_needed()

        url = self.contents_url(owner, repository, path)
        logger.debug("Listing %s/%s:%s", owner, repository, path or "/")

        response = self._get(url, path)
        try:
            items = response.json()
        except ValueError as e:
            raise FetchError(f"GitHub API error: invalid JSON for '{path}'", path=path) from e

        if not isinstance(items, list):
            items = [items]  # Single file returns dict, not list

        return [self._parse_entry(item, path) for item in items]

    def fetch_file_content(self, download_ref: str) -> str:
        """
        Fetch raw content of a file by its download URL.

        Args:
            download_ref: download_url recorded on a File node

        Returns:
            File content as text

        Raises:
            FetchError: If the content cannot be retrieved or is too large
        """
        if not download_ref:
            raise FetchError("File URL is required")

        response = self._get(download_ref, download_ref)
        if len(response.content) >= MAX_FILE_SIZE:
            raise FetchError(
                f"File exceeds {MAX_FILE_SIZE} bytes: {download_ref}",
                path=download_ref,
            )
        return response.text

    def _get(self, url: str, path: str) -> requests.Response:
        """GET a URL and translate failures into FetchError subclasses."""
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"GitHub API error: {e}", path=path) from e

        self.rate_limiter.check_rate_limit(response)

        if response.status_code == 404:
            raise RepositoryNotFound(
                f"GitHub API error: not found '{path}'",
                path=path,
                status_code=404,
            )
        if response.status_code in (403, 429) and self._is_rate_limited(response):
            raise RateLimitExceeded(
                f"GitHub API error: rate limit exceeded ({response.status_code})",
                path=path,
                status_code=response.status_code,
            )

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(
                f"GitHub API error: {e}",
                path=path,
                status_code=response.status_code,
            ) from e

        return response

    @staticmethod
    def _is_rate_limited(response: requests.Response) -> bool:
        """Detect primary or secondary rate limit responses."""
        if response.status_code == 429:
            return True
        if response.headers.get("Retry-After"):
            return True
        if response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        return "rate limit" in response.text.lower()

    @classmethod
    def contents_url(cls, owner: str, repository: str, path: str = "") -> str:
        """Build the contents URL with each segment percent-encoded."""
        return (
            f"{cls.BASE_URL}/repos/{quote(owner, safe='')}/{quote(repository, safe='')}"
            f"/contents/{quote(path, safe='/')}"
        )

    @staticmethod
    def _parse_entry(item: Any, path: str = "") -> ListingEntry:
        """Parse one item of a contents listing."""
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise FetchError(f"GitHub API error: unexpected listing item for '{path}'", path=path)
        kind = NodeKind.DIRECTORY if item.get("type") == "dir" else NodeKind.FILE
        return ListingEntry(
            name=item["name"],
            kind=kind,
            path=item.get("path", item["name"]),
            size=item.get("size"),
            download_ref=item.get("download_url"),
        )
