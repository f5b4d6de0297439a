"""Client for the external embedding service.

Talks to an OpenAI-compatible ``/embeddings`` endpoint. The vector is used
as-is for the cast kNN search, so callers must pass the original (not
normalized) query text.
"""

import logging
import math

import httpx

from ..errors import EmbeddingServiceError, UpstreamTimeoutError
from ..settings import Settings

logger = logging.getLogger(__name__)


def parse_embedding_response(payload) -> list[float]:
    """Extract ``data[0].embedding`` from an embeddings response body.

    Raises ``EmbeddingServiceError`` if the vector is missing or malformed.
    """
    try:
        vector = payload["data"][0]["embedding"]
    except (KeyError, IndexError, TypeError) as exc:
        raise EmbeddingServiceError("Embedding response has no data[0].embedding") from exc

    if not isinstance(vector, list) or not vector:
        raise EmbeddingServiceError("Embedding must be a non-empty array")
    for value in vector:
        # bool is an int subclass; reject it explicitly.
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise EmbeddingServiceError("Embedding contains non-numeric values")
    return [float(v) for v in vector]


class EmbeddingClient:
    """Turns text into a dense vector via the configured embedding model."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self._http = http
        self._url = settings.embedding_api_url.rstrip("/") + "/embeddings"
        self._api_key = settings.embedding_api_key
        self._model = settings.embedding_model
        self._timeout = settings.embedding_timeout

    async def embed(self, text: str) -> list[float]:
        body = {"model": self._model, "input": text, "encoding_format": "float"}
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

        try:
            resp = await self._http.post(
                self._url, json=body, headers=headers, timeout=self._timeout
            )
        except httpx.TimeoutException as exc:
            logger.warning("Embedding request timed out after %ss", self._timeout)
            raise UpstreamTimeoutError("embedding service", self._timeout) from exc
        except httpx.HTTPError as exc:
            logger.exception("Embedding request failed", extra={"model": self._model})
            raise EmbeddingServiceError(f"Embedding request failed: {exc}") from exc

        if resp.status_code >= 400:
            logger.error(
                "Embedding service returned %s: %s", resp.status_code, resp.text[:500]
            )
            raise EmbeddingServiceError(f"Embedding service returned {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise EmbeddingServiceError("Embedding service returned invalid JSON") from exc

        vector = parse_embedding_response(payload)
        logger.info("Embedded query into %d dimensions", len(vector))
        return vector
