"""
AI file summarizer.

Asks the LLM to review one file's content and returns the answer as a
FileSummary.
"""

import logging
from typing import Dict, Any, Optional

from models import FileSummary
from repo_analyzer.errors import SummaryError
from repo_analyzer.llm_client import LLMClient


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = "You are a GitHub code analyzer. Only respond with concise, helpful bullet points."

PROMPT_TEMPLATE = """Help a developer understand and improve this file: "{file_name}".

Provide:

1. What does this code do? (simple terms)
2. Key functions/classes and what they do
3. Is this code clean and maintainable?
4. Any bugs, smells, or bad practices?
5. Suggestions for improvement
6. Libraries or frameworks used

Code:
```
{content}
```"""


class FileSummarizer:
    """Produces AI summaries of individual files."""

    def __init__(self, llm_client: Optional[LLMClient] = None, max_chars: int = 60000):
        """
        Initialize summarizer.

        Args:
            llm_client: LLMClient instance (None disables summaries)
            max_chars: Content beyond this length is cut before prompting
        """
        self.llm_client = llm_client
        self.max_chars = max_chars

    @property
    def enabled(self) -> bool:
        return self.llm_client is not None

    def summarize(self, file_name: str, content: str) -> FileSummary:
        """
        Summarize one file.

        Raises:
            SummaryError: If content is empty, no client is configured, or the call fails
        """
        if not content:
            raise SummaryError("File content is required")
        if not self.llm_client:
            raise SummaryError("LLM client not configured")

        if len(content) > self.max_chars:
            content = content[: self.max_chars] + "\n...[truncated]..."

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": PROMPT_TEMPLATE.format(file_name=file_name, content=content)},
        ]
        analysis = self.llm_client.chat_completions(messages, temperature=0.3, max_tokens=1500)
        if not analysis:
            raise SummaryError(f"Empty summary for {file_name}")

        logger.info("Summarized %s (%d chars)", file_name, len(analysis))
        return FileSummary(
            file_name=file_name,
            analysis=analysis,
            model=self.llm_client.model_name,
        )

    def status(self) -> Dict[str, Any]:
        return {
            "aiEnabled": self.enabled,
            "model": self.llm_client.model_name if self.llm_client else None,
        }
