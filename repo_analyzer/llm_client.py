"""
Self-hosted LLM client.

Sends chat requests to an Ollama server or an OpenAI-compatible endpoint.
"""

import json
import logging
from typing import Optional, Dict, Any

import requests

from repo_analyzer.errors import SummaryError


logger = logging.getLogger(__name__)


class LLMClient:
    """
    Client for a self-hosted LLM server.

    Supports the Ollama /api/generate format and OpenAI-compatible
    chat completion endpoints.
    """

    OLLAMA_ENDPOINT = "/api/generate"
    OPENAI_ENDPOINTS = [
        "/v1/chat/completions",
        "/api/chat/completions",
    ]

    def __init__(
        self,
        base_url: str,
        model_name: str = "gpt-oss:20b",
        api_key: Optional[str] = None,
        timeout: int = 180,
        port: Optional[int] = 11434,
        use_ollama: bool = True,
    ):
        """
        Initialize LLM client.

        Args:
            base_url: LLM server address (with or without scheme and port)
            model_name: Model name
            api_key: API key (Ollama usually needs none)
            timeout: Request timeout in seconds
            port: Port appended when base_url has none
            use_ollama: Use the Ollama request format
        """
        if not base_url.startswith("http"):
            base_url = f"http://{base_url}"

        if ":" in base_url.split("//")[-1] or not port:
            self.base_url = base_url.rstrip("/")
        else:
            self.base_url = f"{base_url.rstrip('/')}:{port}"

        self.model_name = model_name
        self.api_key = api_key
        self.timeout = timeout
        self.use_ollama = use_ollama

    def chat_completions(
        self,
        messages: list,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        """
        Request a chat completion.

        Args:
            messages: [{"role": "user", "content": "..."}, ...]
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Response text

        Raises:
            SummaryError: If the server cannot be reached or answers with an error
        """
        if self.use_ollama:
            return self._call_ollama_api(messages, temperature, max_tokens)
        return self._call_openai_api(messages, temperature, max_tokens)

    def _call_ollama_api(self, messages: list, temperature: float, max_tokens: int) -> str:
        payload = {
            "model": self.model_name,
            "prompt": self._messages_to_prompt(messages),
            "stream": False,
            "options": {
                "num_predict": max_tokens,
                "temperature": temperature,
            },
            "keep_alive": 0,
        }

        url = f"{self.base_url}{self.OLLAMA_ENDPOINT}"
        logger.debug("Ollama request to %s (model %s)", url, self.model_name)

        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise SummaryError(f"Ollama API timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise SummaryError(f"Ollama API request failed: {e}") from e

        if response.status_code != 200:
            raise SummaryError(f"Ollama API error: HTTP {response.status_code}: {response.text[:200]}")

        result = response.json()
        raw_output = result.get("response", "").strip()

        # Thinking models may leave "response" empty
        if not raw_output and result.get("thinking"):
            raw_output = result["thinking"].strip().split("\n")[-1]

        if not raw_output:
            logger.warning("Empty Ollama response (done_reason: %s)", result.get("done_reason", "N/A"))
        return raw_output

    def _call_openai_api(self, messages: list, temperature: float, max_tokens: int) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model_name,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        last_error = None
        for endpoint in self.OPENAI_ENDPOINTS:
            url = f"{self.base_url}{endpoint}"
            try:
                response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                last_error = str(e)
                continue

            if response.status_code == 200:
                return self._parse_openai_response(response.json())
            last_error = f"HTTP {response.status_code}: {response.text[:200]}"
            logger.debug("Endpoint %s failed: %s", url, last_error)

        raise SummaryError(f"OpenAI-compatible API failed: {last_error}")

    @staticmethod
    def _messages_to_prompt(messages: list) -> str:
        """Flatten chat messages into a single Ollama prompt."""
        headings = {
            "system": "### System ###",
            "user": "### User ###",
            "assistant": "### Assistant ###",
        }
        prompt_parts = []
        for msg in messages:
            heading = headings.get(msg.get("role", "user"))
            if heading:
                prompt_parts.append(f"{heading}\n{msg.get('content', '')}\n")
        return "\n".join(prompt_parts).strip()

    @staticmethod
    def _parse_openai_response(data: Dict[str, Any]) -> str:
        if "choices" in data:
            return data["choices"][0]["message"]["content"]

        for key in ("text", "response", "content"):
            if key in data:
                return data[key]

        return json.dumps(data)
