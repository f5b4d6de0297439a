"""Full-text account search.

Runs a ``multi_match`` query over account profile fields using the
normalized query.  Only accounts scoring strictly above
``SCORE_THRESHOLD`` survive, capped at ``ACCOUNT_LIMIT``.
"""

import logging

from ...models import AccountMatch, Location
from ..elasticsearch import iter_hits, unwrap_es_response
from .base import RetrievalPath

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

SCORE_THRESHOLD = 3.0
ACCOUNT_LIMIT = 5

# Profile fields covered by the full-text query; username matches weigh more.
SEARCH_FIELDS = ["username^2", "display_name", "bio", "channels", "city", "state", "country"]

SOURCE_FIELDS = [
    "username",
    "bio",
    "follower_count",
    "cred_score",
    "city",
    "state",
    "country",
    "pfp_url",
]


def shape_account(score: float, src: dict) -> AccountMatch:
    """Project an ``accounts`` document onto :class:`AccountMatch`."""
    return AccountMatch(
        username=src.get("username") or "",
        bio=src.get("bio"),
        follower_count=src.get("follower_count") or 0,
        cred_score=src.get("cred_score") or 0.0,
        location=Location(
            state=src.get("state"),
            city=src.get("city"),
            country=src.get("country"),
        ),
        avatar_url=src.get("pfp_url"),
        match_score=score,
    )


async def search_accounts(
    es,
    normalized: str,
    index: str = "accounts",
    threshold: float = SCORE_THRESHOLD,
    limit: int = ACCOUNT_LIMIT,
) -> list[AccountMatch]:
    """Return up to *limit* accounts whose full-text score is above *threshold*."""
    query = {
        "multi_match": {
            "query": normalized,
            "fields": SEARCH_FIELDS,
        }
    }

    # min_score is inclusive; the strict comparison happens below.
    resp = await es.search(
        index=index,
        query=query,
        size=limit,
        min_score=threshold,
        _source=SOURCE_FIELDS,
    )
    data = unwrap_es_response(resp)

    accounts: list[AccountMatch] = []
    for score, src in iter_hits(data):
        if score is None or score <= threshold:
            continue
        if not src.get("username"):
            continue
        accounts.append(shape_account(score, src))

    accounts.sort(key=lambda a: a.match_score, reverse=True)
    return accounts[:limit]


class AccountSearchPath(RetrievalPath):
    """Lexical half of the hybrid search."""

    def __init__(
        self,
        index: str = "accounts",
        threshold: float = SCORE_THRESHOLD,
        limit: int = ACCOUNT_LIMIT,
    ):
        self.index = index
        self.threshold = threshold
        self.limit = limit

    @property
    def name(self) -> str:
        return "accounts"

    async def search(self, es, normalized: str, vector: list[float]) -> list[AccountMatch]:
        accounts = await search_accounts(
            es, normalized, index=self.index, threshold=self.threshold, limit=self.limit,
        )
        logger.info("Full-text search for %r matched %d accounts", normalized, len(accounts))
        return accounts
