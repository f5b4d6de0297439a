"""Chat-completions client for the relevance agent.

Talks to an OpenAI-compatible ``/chat/completions`` endpoint and returns the
raw message content; decoding the content is the parser's job.
"""

import logging

import httpx

from ...errors import AgentServiceError, UpstreamTimeoutError
from ...settings import Settings

logger = logging.getLogger(__name__)


class LLMClient:
    """JSON-mode text generation against the configured model."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self._http = http
        self._url = settings.llm_api_url.rstrip("/") + "/chat/completions"
        self._api_key = settings.llm_api_key
        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.timeout = settings.llm_timeout

    async def complete_json(self, prompt: str, *, system: str) -> str:
        """Send one system + user exchange and return the reply text."""
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

        try:
            resp = await self._http.post(self._url, json=body, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            logger.warning("Language model request timed out after %ss", self.timeout)
            raise UpstreamTimeoutError("language model", self.timeout) from exc
        except httpx.HTTPError as exc:
            logger.exception("Language model request failed", extra={"model": self.model})
            raise AgentServiceError(f"Language model request failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.error("Language model returned %s: %s", resp.status_code, resp.text[:500])
            raise AgentServiceError(f"Language model returned {resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise AgentServiceError("Language model response has no message content") from exc
        if not isinstance(content, str):
            raise AgentServiceError("Language model message content is not text")
        return content.strip()
