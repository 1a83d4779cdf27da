"""
Repository analysis script.

Crawls a GitHub repository into a filtered file tree, shows live progress and
cancels the crawl on Ctrl+C.
"""

import argparse
import logging
import sys
import threading
from typing import List, Optional

from models import AnalysisResult, FileTreeNode
from repo_analyzer.config import AnalysisConfig
from repo_analyzer.errors import AnalysisError
from repo_analyzer.orchestrator import AnalysisOrchestrator


EXIT_COMPLETED = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyze a GitHub repository's file tree")
    parser.add_argument("url", help="Repository address, e.g. https://github.com/owner/repo")
    parser.add_argument("--max-depth", type=int, default=None, help="Depth limit (clamped to 1-20)")
    parser.add_argument("--caller", default="cli", help="Caller identity used for the session")
    parser.add_argument("--summarize", metavar="PATH", help="Summarize this file after the crawl")
    parser.add_argument("--poll-interval", type=float, default=0.5, help="Progress poll interval in seconds")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def format_tree(node: FileTreeNode, indent: str = "") -> List[str]:
    """Render a tree as indented lines."""
    if node.is_directory:
        suffix = f"  [{node.message}]" if node.truncated else ""
        lines = [f"{indent}{node.name}/{suffix}"]
        for child in node.children or []:
            lines.extend(format_tree(child, indent + "  "))
        return lines
    return [f"{indent}{node.name} ({node.size} bytes)"]


def find_node(root: FileTreeNode, path: str) -> Optional[FileTreeNode]:
    for node in root.iter_nodes():
        if node.path == path and not node.is_directory:
            return node
    return None


def run_analysis(
    orchestrator: AnalysisOrchestrator,
    caller: str,
    url: str,
    max_depth: Optional[int],
    poll_interval: float,
) -> AnalysisResult:
    """Run the analysis on a worker thread while polling progress here."""
    outcome = {}

    def worker():
        outcome["result"] = orchestrator.start_analysis(caller, url, max_depth)

    thread = threading.Thread(target=worker, name="repo-analysis", daemon=True)
    thread.start()

    last_line = ""
    while thread.is_alive():
        try:
            thread.join(poll_interval)
            progress = orchestrator.query_progress(caller)
            if progress["active"]:
                line = f"  [{progress['progress']:3d}%] depth {progress['current_depth']}: {progress['current_path'] or '/'}"
                if line != last_line:
                    print(line)
                    last_line = line
        except KeyboardInterrupt:
            print("\nCancelling analysis...")
            orchestrator.request_cancel(caller)

    return outcome["result"]


def main(argv: Optional[List[str]] = None) -> int:
    """Main analysis entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AnalysisConfig.from_env()
    if not config.github_token:
        print("[WARN] GITHUB_TOKEN is not set (rate limit: 60/hour)")

    orchestrator = AnalysisOrchestrator(config)

    print("=" * 80)
    print(f"Analyzing {args.url}")
    print("=" * 80)

    result = run_analysis(orchestrator, args.caller, args.url, args.max_depth, args.poll_interval)

    if result.cancelled:
        print("Analysis cancelled.")
        return EXIT_CANCELLED
    if not result.completed:
        print(f"Analysis failed: {result.error}")
        return EXIT_FAILED

    print()
    print("\n".join(format_tree(result.tree)))
    print()
    print(f"Files: {result.tree.count_files()}  (saved as #{result.stored.id})")

    if args.summarize:
        node = find_node(result.tree, args.summarize)
        if node is None:
            print(f"[WARN] {args.summarize} is not in the analyzed tree")
            return EXIT_COMPLETED
        try:
            content = orchestrator.get_file_content(node.download_ref)
            summary = orchestrator.summarize_file(node.name, content)
        except AnalysisError as e:
            print(f"[WARN] Could not summarize {args.summarize}: {e}")
            return EXIT_COMPLETED
        print()
        print(f"Summary of {node.path} ({summary.model}):")
        print(summary.analysis)

    return EXIT_COMPLETED


if __name__ == "__main__":
    sys.exit(main())
