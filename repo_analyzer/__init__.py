"""
Repository Analyzer.

This package crawls a public GitHub repository into a filtered file tree:
- Resolves owner/repository from a user-supplied address
- Walks the contents API depth-first, bounded by depth and skip patterns
- Tracks live progress and cooperative cancellation per caller
- Persists finished trees and summarizes individual files with an LLM
"""

from repo_analyzer.config import AnalysisConfig, clamp_max_depth
from repo_analyzer.crawler import TreeCrawler
from repo_analyzer.errors import (
    AnalysisCancelled,
    AnalysisError,
    FetchError,
    InvalidAddress,
    RateLimitExceeded,
    RepositoryNotFound,
    SummaryError,
)
from repo_analyzer.orchestrator import AnalysisOrchestrator
from repo_analyzer.sessions import CancellationToken, SessionRegistry
from repo_analyzer.source_client import GitHubContentsClient
from repo_analyzer.url_resolver import resolve_repository

__all__ = [
    "AnalysisConfig",
    "AnalysisOrchestrator",
    "AnalysisCancelled",
    "AnalysisError",
    "CancellationToken",
    "FetchError",
    "GitHubContentsClient",
    "InvalidAddress",
    "RateLimitExceeded",
    "RepositoryNotFound",
    "SessionRegistry",
    "SummaryError",
    "TreeCrawler",
    "clamp_max_depth",
    "resolve_repository",
]
