"""Configuration for the repository analyzer."""

import os
from dataclasses import dataclass
from typing import Any, Optional


MIN_DEPTH = 1
MAX_DEPTH = 20
DEFAULT_MAX_DEPTH = 15


def clamp_max_depth(value: Any, default: int = DEFAULT_MAX_DEPTH) -> int:
    """
    Clamp a requested depth into 1-20.

    Missing or non-numeric values fall back to the default first.
    """
    try:
        depth = int(value)
    except (TypeError, ValueError):
        depth = default
    if depth == 0:
        depth = default
    return min(max(depth, MIN_DEPTH), MAX_DEPTH)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class AnalysisConfig:
    """Configuration for the analysis orchestrator."""
    github_token: Optional[str] = None
    default_max_depth: int = DEFAULT_MAX_DEPTH
    request_timeout: int = 30
    rate_limit_buffer: int = 100
    storage_dir: str = "output"
    use_llm: bool = False
    llm_base_url: Optional[str] = None
    llm_model: str = "gpt-oss:20b"
    llm_api_key: Optional[str] = None
    llm_timeout: int = 180

    def __post_init__(self):
        self.default_max_depth = clamp_max_depth(self.default_max_depth)
        if self.llm_base_url:
            self.use_llm = True

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Build a config from environment variables."""
        return cls(
            github_token=os.getenv("GITHUB_TOKEN"),
            default_max_depth=_env_int("REPO_ANALYZER_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            request_timeout=_env_int("REPO_ANALYZER_TIMEOUT", 30),
            storage_dir=os.getenv("REPO_ANALYZER_STORAGE_DIR", "output"),
            llm_base_url=os.getenv("LLM_BASE_URL"),
            llm_model=os.getenv("LLM_MODEL", "gpt-oss:20b"),
            llm_api_key=os.getenv("LLM_API_KEY"),
        )
