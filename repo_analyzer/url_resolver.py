"""
Source address resolution.

Extracts the (owner, repository) pair from a user-supplied GitHub address.
"""

import re
from typing import Tuple

from repo_analyzer.errors import InvalidAddress


# First two path segments after the host marker
GITHUB_PATH_PATTERN = re.compile(r"github\.com[/:]([^/\s?#]+)/([^/\s?#]+)")
# Host-qualified form for any host, e.g. https://host.example/acme/widgets
HOST_PATH_PATTERN = re.compile(r"^(?:[a-z][a-z0-9+.-]*://)?[^/\s]+\.[^/\s]+/([^/\s?#]+)/([^/\s?#]+)", re.IGNORECASE)
# Bare owner/repo
BARE_PATH_PATTERN = re.compile(r"^([^/\s?#:]+)/([^/\s?#]+)/?$")


def resolve_repository(address: str) -> Tuple[str, str]:
    """
    Extract owner and repository name from an address.

    Accepts "https://github.com/owner/repo", "github.com/owner/repo/tree/main",
    "git@github.com:owner/repo.git", host-qualified forms on other hosts and
    bare "owner/repo".

    Args:
        address: User-supplied repository address

    Returns:
        (owner, repository) tuple

    Raises:
        InvalidAddress: If no two-segment path can be found
    """
    if not address or not address.strip():
        raise InvalidAddress(address or "")

    text = address.strip()
    match = (
        GITHUB_PATH_PATTERN.search(text)
        or HOST_PATH_PATTERN.match(text)
        or BARE_PATH_PATTERN.match(text)
    )
    if not match:
        raise InvalidAddress(address)

    owner, repository = match.group(1), match.group(2)
    if repository.endswith(".git"):
        repository = repository[: -len(".git")]
    if not owner or not repository:
        raise InvalidAddress(address)

    return owner, repository
