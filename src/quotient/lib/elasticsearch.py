"""Shared Elasticsearch utilities.

Helpers for working with Elasticsearch responses and the long-lived client
used by the retriever, the snapshot store and the notification token store.
"""

import logging

from elastic_transport import ObjectApiResponse
from elasticsearch import AsyncElasticsearch

from ..errors import RetrievalError
from ..settings import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> AsyncElasticsearch:
    """Create the application-scoped client. Closed in the app lifespan."""
    if settings.elasticsearch_api_key:
        return AsyncElasticsearch(settings.elasticsearch_url, api_key=settings.elasticsearch_api_key)
    return AsyncElasticsearch(settings.elasticsearch_url)


def unwrap_es_response(resp) -> dict:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict.

    Raises ``RetrievalError`` if the response type is unexpected.
    """
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    elif isinstance(resp, dict):
        return resp
    else:
        logger.error("Unexpected Elasticsearch response type: %s", type(resp))
        raise RetrievalError("Invalid Elasticsearch response")


def iter_hits(data: dict):
    """Yield ``(score, source)`` pairs from a search response body."""
    for hit in data.get("hits", {}).get("hits", []):
        yield hit.get("_score"), hit.get("_source") or {}
