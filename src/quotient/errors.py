"""Error taxonomy for the search pipeline.

Every component raises one of these and lets it travel up to the request
boundary, where :func:`quotient.main.handle_quotient_error` turns it into a
``{"error": ..., "details": ...}`` body with the matching status code.
"""


class QuotientError(Exception):
    """Base class for all pipeline errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details


class InvalidInputError(QuotientError):
    """Missing or malformed request fields. User-correctable."""

    status_code = 400
    code = "invalid_input"


class SnapshotNotFoundError(QuotientError):
    """No snapshot is stored under the requested id."""

    status_code = 404
    code = "not_found"


class EmbeddingServiceError(QuotientError):
    status_code = 502
    code = "embedding_failed"


class RetrievalError(QuotientError):
    status_code = 502
    code = "retrieval_failed"


class AgentServiceError(QuotientError):
    status_code = 502
    code = "agent_failed"


class AgentParseError(QuotientError):
    """The language model answered, but not with a usable JSON report."""

    status_code = 502
    code = "agent_parse_failed"


class UpstreamTimeoutError(QuotientError):
    """An external call (embedding, store, language model) missed its deadline."""

    status_code = 504
    code = "upstream_timeout"

    def __init__(self, service: str, timeout: float | None = None):
        if timeout is None:
            details = f"{service} timed out"
        else:
            details = f"{service} did not respond within {timeout:g}s"
        super().__init__(details)
        self.service = service
        self.timeout = timeout


class SnapshotStoreError(QuotientError):
    """The store failed while writing or reading a snapshot."""

    status_code = 502
    code = "snapshot_store_failed"
