"""Vector cast search.

Runs a kNN query against the ``casts`` index embedding field using the
embedding of the original query.  Elasticsearch scores cosine kNN hits as
``(1 + cosine) / 2``; scores are mapped back to cosine similarity before the
threshold is applied so ``match_score`` is the similarity itself.
"""

import logging

from ...models import CastMatch
from ..elasticsearch import iter_hits, unwrap_es_response
from .base import RetrievalPath

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

SIMILARITY_THRESHOLD = 0.7
NUM_NEIGHBOURS = 250
EMBEDDING_FIELD = "embedding"

SOURCE_FIELDS = [
    "username",
    "text",
    "hash",
    "cast_url",
    "timestamp",
    "likes_count",
    "mentioned_channels",
    "mentioned_users",
]

CAST_URL_BASE = "https://warpcast.com"


def score_to_cosine(score: float) -> float:
    """Invert Elasticsearch's ``(1 + cosine) / 2`` kNN score."""
    return 2.0 * score - 1.0


def build_cast_url(src: dict) -> str | None:
    """Use the stored URL, else derive one from the author and short hash."""
    if src.get("cast_url"):
        return src["cast_url"]
    username = src.get("username")
    cast_hash = src.get("hash")
    if username and cast_hash:
        return f"{CAST_URL_BASE}/{username}/{cast_hash[:10]}"
    return None


def shape_cast(similarity: float, src: dict) -> CastMatch:
    """Project a ``casts`` document onto :class:`CastMatch`."""
    return CastMatch(
        username=src.get("username") or "unknown",
        cast_text=src["text"],
        cast_url=build_cast_url(src),
        timestamp=src.get("timestamp"),
        likes_count=src.get("likes_count") or 0,
        mentioned_channels=src.get("mentioned_channels") or [],
        mentioned_users=src.get("mentioned_users") or [],
        match_score=similarity,
    )


async def knn_search_casts(
    es,
    query_vector: list[float],
    index: str = "casts",
    threshold: float = SIMILARITY_THRESHOLD,
    k: int = NUM_NEIGHBOURS,
) -> list[CastMatch]:
    """Return casts whose cosine similarity to *query_vector* is above *threshold*."""
    knn_query = {
        "bool": {
            "must": {
                "knn": {
                    "field": EMBEDDING_FIELD,
                    "query_vector": query_vector,
                    "k": k,
                    "num_candidates": max(100, k * 2),
                    # Raw cosine similarity, inclusive; the strict check is below.
                    "similarity": threshold,
                }
            },
            "filter": [{"exists": {"field": "text"}}],
        }
    }

    resp = await es.search(index=index, query=knn_query, size=k, _source=SOURCE_FIELDS)
    data = unwrap_es_response(resp)

    casts: list[CastMatch] = []
    for score, src in iter_hits(data):
        if score is None:
            continue
        similarity = score_to_cosine(score)
        if similarity <= threshold:
            continue
        if not src.get("text"):
            continue
        casts.append(shape_cast(similarity, src))

    casts.sort(key=lambda c: c.match_score, reverse=True)
    return casts


class CastSearchPath(RetrievalPath):
    """Semantic half of the hybrid search."""

    def __init__(
        self,
        index: str = "casts",
        threshold: float = SIMILARITY_THRESHOLD,
        k: int = NUM_NEIGHBOURS,
    ):
        self.index = index
        self.threshold = threshold
        self.k = k

    @property
    def name(self) -> str:
        return "casts"

    async def search(self, es, normalized: str, vector: list[float]) -> list[CastMatch]:
        casts = await knn_search_casts(
            es, vector, index=self.index, threshold=self.threshold, k=self.k,
        )
        logger.info("Vector search matched %d casts", len(casts))
        return casts
