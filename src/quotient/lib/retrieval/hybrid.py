"""Hybrid retriever: full-text accounts plus vector casts.

Both paths are issued concurrently and their results concatenated in path
order (accounts first).  Scores are never compared across paths; each path
sorts its own output.  A failure in either path aborts the whole retrieval.
"""

import asyncio
import logging

from elastic_transport import ConnectionTimeout

from ...errors import QuotientError, RetrievalError, UpstreamTimeoutError
from ...models import CandidateRecord
from ...settings import Settings
from .accounts import AccountSearchPath
from .base import RetrievalPath
from .casts import CastSearchPath

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class HybridRetriever:
    """Runs every :class:`RetrievalPath` against one store client."""

    def __init__(
        self,
        es,
        paths: list[RetrievalPath] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._es = es
        self.paths = paths if paths is not None else [AccountSearchPath(), CastSearchPath()]
        self.timeout = timeout

    @classmethod
    def from_settings(cls, es, settings: Settings) -> "HybridRetriever":
        return cls(
            es,
            paths=[
                AccountSearchPath(
                    index=settings.accounts_index,
                    threshold=settings.account_score_threshold,
                    limit=settings.account_limit,
                ),
                CastSearchPath(
                    index=settings.casts_index,
                    threshold=settings.cast_similarity_threshold,
                    k=settings.cast_neighbours,
                ),
            ],
            timeout=settings.retrieval_timeout,
        )

    async def _run_path(
        self, path: RetrievalPath, normalized: str, vector: list[float]
    ) -> list[CandidateRecord]:
        try:
            return await path.search(self._es, normalized, vector)
        except QuotientError:
            raise
        except ConnectionTimeout as exc:
            logger.warning("Retrieval path '%s' timed out in the store client", path.name)
            # The client request timeout fired, not the retrieval deadline.
            raise UpstreamTimeoutError("search store") from exc
        except Exception as exc:
            logger.exception(
                "Retrieval path '%s' failed", path.name, extra={"normalized_query": normalized}
            )
            raise RetrievalError(f"{path.name} search failed: {exc}") from exc

    async def retrieve(self, normalized: str, vector: list[float]) -> list[CandidateRecord]:
        """Return account matches followed by cast matches."""
        try:
            batches = await asyncio.wait_for(
                asyncio.gather(*(self._run_path(p, normalized, vector) for p in self.paths)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Hybrid retrieval exceeded %ss", self.timeout)
            raise UpstreamTimeoutError("search store", self.timeout) from exc

        records: list[CandidateRecord] = []
        for batch in batches:
            records.extend(batch)
        return records
