"""Per-request search pipeline.

    raw query → normalize → embed(original) → hybrid retrieve(normalized, vector)
              → aggregate → (optional) relevance agent

Every step raises a typed error; nothing is retried or substituted.  A
failed embedding aborts the request because the cast path cannot run
without it.
"""

import logging

from ..models import AgentReport, Query, ResultSet
from .aggregate import aggregate
from .agent import RelevanceAgent
from .embeddings import EmbeddingClient
from .normalizer import normalize
from .retrieval import HybridRetriever

logger = logging.getLogger(__name__)


class SearchPipeline:
    def __init__(
        self,
        embedder: EmbeddingClient,
        retriever: HybridRetriever,
        agent: RelevanceAgent | None = None,
    ):
        self.embedder = embedder
        self.retriever = retriever
        self.agent = agent

    async def search(self, raw_query) -> tuple[Query, ResultSet]:
        query = normalize(raw_query)
        logger.info("Processing query %r (normalized %r)", query.original, query.normalized)

        vector = await self.embedder.embed(query.original)
        records = await self.retriever.retrieve(query.normalized, vector)
        result_set = aggregate(records)

        logger.info(
            "Retrieved %d accounts and %d casts",
            result_set.stats.account_count,
            result_set.stats.cast_count,
        )
        return query, result_set

    async def search_and_analyze(self, raw_query) -> tuple[Query, ResultSet, AgentReport]:
        if self.agent is None:
            raise RuntimeError("SearchPipeline was built without a relevance agent")
        query, result_set = await self.search(raw_query)
        report = await self.agent.analyze(query, result_set)
        return query, result_set, report
