"""Hybrid retrieval over the search store.

Two paths, lexical over accounts and semantic over casts, combined by
:class:`HybridRetriever`.
"""

from .accounts import AccountSearchPath, search_accounts
from .base import RetrievalPath
from .casts import CastSearchPath, knn_search_casts
from .hybrid import HybridRetriever

__all__ = [
    "AccountSearchPath",
    "CastSearchPath",
    "HybridRetriever",
    "RetrievalPath",
    "knn_search_casts",
    "search_accounts",
]
