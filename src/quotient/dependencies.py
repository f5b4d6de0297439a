"""FastAPI dependencies that build per-request components.

Components are cheap wrappers around the long-lived handles the lifespan in
``main.py`` puts on ``app.state``: ``es`` (``AsyncElasticsearch``) and
``http`` (``httpx.AsyncClient``).  Tests either set those attributes to
fakes or override these dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from .lib.agent import LLMClient, RelevanceAgent
from .lib.embeddings import EmbeddingClient
from .lib.notifications import NotificationTokenStore
from .lib.pipeline import SearchPipeline
from .lib.retrieval import HybridRetriever
from .lib.snapshots import SnapshotStore
from .settings import Settings, get_settings

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_embedding_client(request: Request, settings: SettingsDep) -> EmbeddingClient:
    return EmbeddingClient(request.app.state.http, settings)


def get_retriever(request: Request, settings: SettingsDep) -> HybridRetriever:
    return HybridRetriever.from_settings(request.app.state.es, settings)


def get_relevance_agent(request: Request, settings: SettingsDep) -> RelevanceAgent:
    return RelevanceAgent(
        LLMClient(request.app.state.http, settings),
        treat_missing_as_relevant=settings.agent_treat_missing_as_relevant,
    )


def get_pipeline(
    embedder: Annotated[EmbeddingClient, Depends(get_embedding_client)],
    retriever: Annotated[HybridRetriever, Depends(get_retriever)],
    agent: Annotated[RelevanceAgent, Depends(get_relevance_agent)],
) -> SearchPipeline:
    return SearchPipeline(embedder, retriever, agent)


def get_snapshot_store(request: Request, settings: SettingsDep) -> SnapshotStore:
    return SnapshotStore(request.app.state.es, index=settings.snapshots_index)


def get_token_store(request: Request, settings: SettingsDep) -> NotificationTokenStore:
    return NotificationTokenStore(request.app.state.es, index=settings.notification_tokens_index)
