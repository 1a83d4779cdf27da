"""Shared fixtures: an in-memory source client standing in for GitHub."""

from typing import Callable, Dict, List, Optional

import pytest

from models import ListingEntry, NodeKind
from repo_analyzer.errors import RepositoryNotFound


def file_entry(path: str, size: Optional[int] = 10) -> ListingEntry:
    name = path.rsplit("/", 1)[-1]
    return ListingEntry(
        name=name,
        kind=NodeKind.FILE,
        path=path,
        size=size,
        download_ref=f"https://raw.example/{path}",
    )


def dir_entry(path: str) -> ListingEntry:
    return ListingEntry(name=path.rsplit("/", 1)[-1], kind=NodeKind.DIRECTORY, path=path)


class FakeSourceClient:
    """Serves listings from a dict of path -> entries and records every call."""

    def __init__(self, listings: Dict[str, List[ListingEntry]], on_list: Optional[Callable[[str], None]] = None):
        self.listings = listings
        self.on_list = on_list
        self.calls: List[str] = []
        self.errors: Dict[str, Exception] = {}
        self.contents: Dict[str, str] = {}

    def list_directory(self, owner: str, repository: str, path: str = "") -> List[ListingEntry]:
        self.calls.append(path)
        if self.on_list:
            self.on_list(path)
        if path in self.errors:
            raise self.errors[path]
        if path not in self.listings:
            raise RepositoryNotFound(f"GitHub API error: not found '{path}'", path=path, status_code=404)
        return list(self.listings[path])

    def fetch_file_content(self, download_ref: str) -> str:
        return self.contents[download_ref]


@pytest.fixture
def nested_listings():
    """A repo four directories deep with skippable and oversized entries."""
    return {
        "": [
            file_entry("readme.txt"),
            dir_entry("src"),
            dir_entry("node_modules"),
            file_entry("yarn.lock"),
            file_entry("big.bin", size=1024 * 1024),
        ],
        "src": [
            file_entry("src/main.py", size=200),
            dir_entry("src/pkg"),
            file_entry("src/app.min.js"),
            file_entry("src/debug.log"),
        ],
        "src/pkg": [
            file_entry("src/pkg/util.py"),
            dir_entry("src/pkg/deep"),
            dir_entry("src/pkg/dist"),
        ],
        "src/pkg/deep": [
            file_entry("src/pkg/deep/leaf.py"),
        ],
        "node_modules": [
            file_entry("node_modules/left-pad.js"),
        ],
    }


@pytest.fixture
def source(nested_listings):
    return FakeSourceClient(nested_listings)
