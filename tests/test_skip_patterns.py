"""Tests for the skip-pattern filter."""

import pytest

from repo_analyzer.skip_patterns import SKIP_PATTERNS, should_skip


@pytest.mark.parametrize(
    "name",
    [
        "node_modules",
        ".git",
        "dist",
        "build",
        ".next",
        ".nuxt",
        "coverage",
        ".nyc_output",
        ".cache",
        ".parcel-cache",
        "npm-debug.log",
        "yarn.lock",
        "Cargo.lock",
        "vendor.min.js",
        "styles.min.css",
        "bundle.js.map",
    ],
)
def test_skips_known_patterns(name):
    assert should_skip(name)


@pytest.mark.parametrize(
    "name",
    [
        "src",
        "main.py",
        "package.json",
        "package-lock.json",
        "Build",
        "NODE_MODULES",
        "distribution",
        "app.js",
        "mapper.py",
        "changelog",
    ],
)
def test_keeps_other_names(name):
    assert not should_skip(name)


def test_wildcards_match_whole_name():
    assert should_skip("x.log")
    assert not should_skip("x.log.txt")
    assert not should_skip("logs")


def test_exact_names_do_not_match_substrings():
    assert not should_skip("my_node_modules")
    assert not should_skip(".github")


def test_custom_patterns():
    assert should_skip("notes.md", patterns=["*.md"])
    assert not should_skip("node_modules", patterns=["*.md"])
    assert "node_modules" in SKIP_PATTERNS
