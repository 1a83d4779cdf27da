"""Tests for the analyze_repo script."""

from unittest.mock import MagicMock

import pytest

import analyze_repo
from conftest import FakeSourceClient, dir_entry, file_entry
from models import AnalysisResult, AnalysisStatus, FileTreeNode
from repo_analyzer.config import AnalysisConfig
from repo_analyzer.orchestrator import AnalysisOrchestrator
from repo_analyzer.storage import RepositoryStore


def test_parse_args_defaults():
    args = analyze_repo.parse_args(["https://github.com/acme/widgets"])

    assert args.url == "https://github.com/acme/widgets"
    assert args.max_depth is None
    assert args.caller == "cli"
    assert args.summarize is None


def test_format_tree_marks_truncated_directories():
    root = FileTreeNode.directory("widgets", "", 0)
    src = FileTreeNode.directory("src", "src", 1)
    src.truncated = True
    src.message = "Maximum depth (1) reached"
    root.children = [FileTreeNode.file("readme.txt", "readme.txt", 1, 10, "u"), src]

    assert analyze_repo.format_tree(root) == [
        "widgets/",
        "  readme.txt (10 bytes)",
        "  src/  [Maximum depth (1) reached]",
    ]


def test_run_analysis_returns_worker_result(tmp_path):
    source = FakeSourceClient({"": [file_entry("readme.txt"), dir_entry("src")]})
    orchestrator = AnalysisOrchestrator(
        config=AnalysisConfig(),
        source_client=source,
        store=RepositoryStore(str(tmp_path)),
    )

    result = analyze_repo.run_analysis(orchestrator, "cli", "acme/widgets", 1, poll_interval=0.01)

    assert result.completed
    assert [c.name for c in result.tree.children] == ["readme.txt", "src"]


@pytest.mark.parametrize(
    "status, code",
    [(AnalysisStatus.CANCELLED, 130), (AnalysisStatus.FAILED, 1)],
)
def test_main_exit_codes(monkeypatch, tmp_path, status, code):
    monkeypatch.setenv("REPO_ANALYZER_STORAGE_DIR", str(tmp_path))
    monkeypatch.setattr(
        analyze_repo,
        "run_analysis",
        MagicMock(return_value=AnalysisResult(status=status, error="boom")),
    )

    assert analyze_repo.main(["acme/widgets"]) == code
