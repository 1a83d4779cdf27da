"""
Analysis orchestrator.

Runs one analysis request end to end: resolve the address, register a
session, crawl, release the session and persist the tree.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from models import AnalysisResult, AnalysisStatus, FileSummary, FileTreeNode, StoredRepository
from repo_analyzer.config import AnalysisConfig, clamp_max_depth
from repo_analyzer.crawler import TreeCrawler
from repo_analyzer.errors import AnalysisCancelled, FetchError, InvalidAddress
from repo_analyzer.llm_client import LLMClient
from repo_analyzer.rate_limiter import RateLimiter
from repo_analyzer.sessions import CancellationToken, SessionRegistry, make_session_id
from repo_analyzer.source_client import GitHubContentsClient
from repo_analyzer.storage import RepositoryStore
from repo_analyzer.summarizer import FileSummarizer
from repo_analyzer.url_resolver import resolve_repository


logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Entry point for analysis requests.

    start_analysis() blocks until the crawl ends. request_cancel() and
    query_progress() may be called from other threads while it runs.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        source_client=None,
        store: Optional[RepositoryStore] = None,
        registry: Optional[SessionRegistry] = None,
        summarizer: Optional[FileSummarizer] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize orchestrator.

        Collaborators not supplied are built from the config.

        Args:
            config: AnalysisConfig with settings
            source_client: Directory-listing source (GitHubContentsClient by default)
            store: Persistence gateway
            registry: Session registry shared with cancel/progress callers
            summarizer: File summarizer
            clock: Time source for session ids
        """
        self.config = config if config is not None else AnalysisConfig()
        if source_client is None:
            source_client = GitHubContentsClient(
                token=self.config.github_token,
                rate_limiter=RateLimiter(buffer=self.config.rate_limit_buffer),
                timeout=self.config.request_timeout,
            )
        self.source_client = source_client
        self.store = store if store is not None else RepositoryStore(self.config.storage_dir)
        self.registry = registry if registry is not None else SessionRegistry()
        self.summarizer = summarizer if summarizer is not None else FileSummarizer(self._build_llm_client())
        self.crawler = TreeCrawler(self.source_client)
        self._clock = clock

    def _build_llm_client(self) -> Optional[LLMClient]:
        if not self.config.use_llm or not self.config.llm_base_url:
            return None
        return LLMClient(
            base_url=self.config.llm_base_url,
            model_name=self.config.llm_model,
            api_key=self.config.llm_api_key,
            timeout=self.config.llm_timeout,
        )

    def start_analysis(
        self,
        caller: str,
        source_address: str,
        max_depth: Optional[Any] = None,
    ) -> AnalysisResult:
        """
        Analyze a repository.

        Args:
            caller: Caller identity
            source_address: Repository address
            max_depth: Requested depth, clamped into 1-20

        Returns:
            AnalysisResult with status completed, cancelled, or failed
        """
        depth = clamp_max_depth(
            max_depth if max_depth is not None else self.config.default_max_depth,
            default=self.config.default_max_depth,
        )

        try:
            owner, repository = resolve_repository(source_address)
        except InvalidAddress as e:
            logger.info("Rejected address from %s: %s", caller, e)
            return AnalysisResult(status=AnalysisStatus.FAILED, max_depth=depth, error=str(e))

        result = AnalysisResult(
            status=AnalysisStatus.FAILED,
            owner=owner,
            repository=repository,
            max_depth=depth,
        )

        try:
            tree = self._crawl(caller, owner, repository, depth)
        except AnalysisCancelled:
            logger.info("Analysis of %s/%s cancelled by %s", owner, repository, caller)
            result.status = AnalysisStatus.CANCELLED
            return result
        except FetchError as e:
            logger.error("Analysis of %s/%s failed: %s", owner, repository, e)
            result.error = str(e)
            return result
        except Exception as e:
            logger.exception("Analysis of %s/%s failed unexpectedly", owner, repository)
            result.error = f"Unexpected error: {e}"
            return result

        try:
            result.stored = self.store.save(caller, source_address, tree)
        except OSError as e:
            logger.exception("Failed to save %s/%s", owner, repository)
            result.error = f"Failed to save repository: {e}"
            return result

        result.status = AnalysisStatus.COMPLETED
        result.tree = tree
        return result

    def _crawl(self, caller: str, owner: str, repository: str, max_depth: int) -> FileTreeNode:
        """Run the crawler inside a registered session."""
        started_at = self._clock()
        session_id = make_session_id(caller, started_at)
        token: CancellationToken = self.registry.register(session_id, caller, started_at)

        def on_progress(depth: int, path: str) -> None:
            self.registry.update_progress(session_id, depth, path, max_depth)

        try:
            tree = self.crawler.crawl(owner, repository, max_depth, token, on_progress)
        except Exception as e:
            # A crawl that fails after cancellation still ends as cancelled
            if token.cancelled:
                raise AnalysisCancelled() from e
            raise
        finally:
            self.registry.unregister(session_id)

        # Once unregistered no new cancel can arrive, so this check is final
        if token.cancelled:
            raise AnalysisCancelled()
        return tree

    def request_cancel(self, caller: str) -> Dict[str, Any]:
        """Cancel the caller's live analyses. Succeeds even if none is live."""
        count = self.registry.mark_cancelled(caller)
        return {"message": "Analysis cancellation requested", "cancelled_sessions": count}

    def query_progress(self, caller: str) -> Dict[str, Any]:
        """Progress of the caller's live analysis, or {"active": False}."""
        snapshot = self.registry.progress(caller)
        if snapshot is None:
            return {"active": False}
        return snapshot.to_dict()

    def get_file_content(self, download_ref: str) -> str:
        """Fetch raw content for a File node's download_ref."""
        return self.source_client.fetch_file_content(download_ref)

    def summarize_file(self, file_name: str, content: str) -> FileSummary:
        return self.summarizer.summarize(file_name, content)

    def ai_status(self) -> Dict[str, Any]:
        return self.summarizer.status()

    def list_repositories(self, caller: str) -> List[StoredRepository]:
        return self.store.find_by_caller(caller)

    def delete_repository(self, caller: str, repository_id: int) -> bool:
        return self.store.delete(caller, repository_id)
