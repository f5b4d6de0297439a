"""Base abstraction for retrieval paths.

Each path has a unique name and an async ``search`` method that returns
shaped candidate records, ordered by descending score.  The hybrid
retriever runs every path concurrently and concatenates their output.
"""

from abc import ABC, abstractmethod

from ...models import CandidateRecord


class RetrievalPath(ABC):
    """Abstract base class for one half of the hybrid search.

    Subclasses must implement ``name`` (property) and ``search``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name identifying this path (e.g. ``accounts``)."""
        ...

    @abstractmethod
    async def search(
        self,
        es,
        normalized: str,
        vector: list[float],
    ) -> list[CandidateRecord]:
        """Query the store and return shaped candidates.

        Parameters
        ----------
        es:
            An ``AsyncElasticsearch`` client instance.
        normalized:
            The stopword-stripped query, for full-text matching.
        vector:
            The embedding of the original query, for vector matching.

        Returns
        -------
        list[CandidateRecord]
        """
        ...
