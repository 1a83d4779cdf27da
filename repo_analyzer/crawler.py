"""
Repository tree crawler.

Walks a repository depth-first through a source client, one directory listing
in flight at a time, and builds a filtered FileTreeNode tree.
"""

import logging
from typing import Callable, List, Optional

from models import FileTreeNode, ListingEntry, MAX_FILE_SIZE
from repo_analyzer.errors import AnalysisCancelled
from repo_analyzer.sessions import CancellationToken
from repo_analyzer.skip_patterns import SKIP_PATTERNS, should_skip


logger = logging.getLogger(__name__)

# Called with (depth, path) before a directory visit returns
ProgressCallback = Callable[[int, str], None]


class TreeCrawler:
    """
    Depth-first crawler over a directory-listing source.

    Siblings are visited sequentially in listing order. A directory at depth
    max_depth is returned truncated, so no node in the result is deeper than
    max_depth. Cancellation is polled on entry to each directory, right after
    each listing returns, and before each entry is processed.
    """

    def __init__(self, source_client, skip_patterns=SKIP_PATTERNS, max_file_size: int = MAX_FILE_SIZE):
        """
        Initialize crawler.

        Args:
            source_client: Object with list_directory(owner, repository, path)
            skip_patterns: Names and wildcards excluded from the walk
            max_file_size: Files with this size or larger are dropped
        """
        self.source_client = source_client
        self.skip_patterns = tuple(skip_patterns)
        self.max_file_size = max_file_size

    def crawl(
        self,
        owner: str,
        repository: str,
        max_depth: int,
        token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> FileTreeNode:
        """
        Crawl a repository from its root.

        Args:
            owner: Repository owner
            repository: Repository name
            max_depth: Deepest node depth allowed in the result
            token: Cancellation token polled during the walk
            on_progress: Receives the walk position for progress reporting

        Returns:
            Root Directory node named after the repository

        Raises:
            AnalysisCancelled: If the token was cancelled; no partial tree is returned
            FetchError: If any listing fails
        """
        token = token if token is not None else CancellationToken()
        logger.info("Crawling %s/%s (max depth %d)", owner, repository, max_depth)
        root = self._crawl_directory(
            owner,
            repository,
            name=repository,
            path="",
            depth=0,
            max_depth=max_depth,
            token=token,
            on_progress=on_progress,
        )
        logger.info("Crawled %s/%s: %d files", owner, repository, root.count_files())
        return root

    def _crawl_directory(
        self,
        owner: str,
        repository: str,
        name: str,
        path: str,
        depth: int,
        max_depth: int,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback],
    ) -> FileTreeNode:
        self._check_cancelled(token)

        node = FileTreeNode.directory(name, path, depth)

        if depth >= max_depth:
            node.truncated = True
            node.message = f"Maximum depth ({max_depth}) reached"
            self._report(on_progress, depth, path)
            return node

        entries = self.source_client.list_directory(owner, repository, path)
        # The listing may have taken a while; discard it if cancelled meanwhile
        self._check_cancelled(token)

        for entry in self._filter(entries):
            self._check_cancelled(token)

            if entry.is_directory:
                node.children.append(
                    self._crawl_directory(
                        owner,
                        repository,
                        name=entry.name,
                        path=entry.path,
                        depth=depth + 1,
                        max_depth=max_depth,
                        token=token,
                        on_progress=on_progress,
                    )
                )
            elif self._within_size_limit(entry):
                node.children.append(
                    FileTreeNode.file(
                        name=entry.name,
                        path=entry.path,
                        depth=depth + 1,
                        size=entry.size,
                        download_ref=entry.download_ref,
                    )
                )

        self._report(on_progress, depth, path)
        return node

    def _filter(self, entries: List[ListingEntry]):
        for entry in entries:
            if should_skip(entry.name, self.skip_patterns):
                logger.debug("Skipping %s", entry.path)
                continue
            yield entry

    def _within_size_limit(self, entry: ListingEntry) -> bool:
        # Unknown size cannot be proven under the ceiling
        return entry.size is not None and entry.size < self.max_file_size

    @staticmethod
    def _check_cancelled(token: CancellationToken) -> None:
        if token.cancelled:
            raise AnalysisCancelled()

    @staticmethod
    def _report(on_progress: Optional[ProgressCallback], depth: int, path: str) -> None:
        if on_progress is not None:
            on_progress(depth, path)
