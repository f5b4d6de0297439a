"""Query normalization for full-text search.

The embedding path always gets the original text; only the account
full-text query uses the normalized form.
"""

from ..errors import InvalidInputError
from ..models import Query

STOPWORDS = frozenset({
    # articles
    "a", "an", "the",
    # conjunctions
    "and", "or", "but", "nor", "so", "yet",
    # prepositions
    "on", "in", "at", "of", "for", "to", "with", "by", "from", "about",
    # domain noise
    "find", "show", "me", "who", "are", "is", "looking", "people", "someone",
    "anyone",
    # separators
    "/", "-",
})


def normalize(raw) -> Query:
    """Return a :class:`Query` for *raw*.

    Raises :class:`InvalidInputError` if *raw* is not a string or is blank.
    If every token is a stopword the trimmed original is used as-is.
    """
    if not isinstance(raw, str):
        raise InvalidInputError("query must be a string")
    trimmed = raw.strip()
    if not trimmed:
        raise InvalidInputError("query must not be empty")

    tokens = [t for t in trimmed.lower().split() if t not in STOPWORDS]
    normalized = " ".join(tokens) or trimmed
    return Query(original=trimmed, normalized=normalized)
