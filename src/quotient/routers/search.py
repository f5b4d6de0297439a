"""Search router – hybrid retrieval and relevance analysis over HTTP.

POST /search
    Normalize, embed, retrieve and aggregate; no language model involved.

POST /agent/process
    Run the relevance agent over a result set from ``/search``.

POST /search/report
    Both of the above in one call.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import Field

from ..dependencies import get_pipeline, get_relevance_agent
from ..errors import InvalidInputError
from ..lib.agent import RelevanceAgent
from ..lib.normalizer import normalize
from ..lib.pipeline import SearchPipeline
from ..lib.report_links import link_report
from ..models import AgentReport, ResultSet, WireModel
from ..security import verify_api_key

router = APIRouter(tags=["search"], dependencies=[Depends(verify_api_key)])

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class SearchRequest(WireModel):
    query: str = Field(..., description="Natural-language query about builders")


class SearchResponse(WireModel):
    query: str = Field(..., description="The trimmed original query")
    normalized_query: str = Field(..., description="The form used for full-text search")
    results: ResultSet
    record_count: int


class ReportRequest(SearchRequest):
    link_profiles: bool = Field(
        False, description="Link usernames in the summary and takeaways to their profiles"
    )


class ReportResponse(SearchResponse):
    agent_report: AgentReport


class AgentProcessRequest(WireModel):
    """Request body for the agent endpoint."""

    query: str | None = None
    original_query: str | None = Field(
        None, description="Un-normalized query; preferred over ``query`` when present"
    )
    results: ResultSet | None = None
    link_profiles: bool = False


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/search", response_model=SearchResponse)
async def search(
    payload: SearchRequest,
    pipeline: Annotated[SearchPipeline, Depends(get_pipeline)],
) -> SearchResponse:
    """Return account and cast candidates for a query."""
    query, result_set = await pipeline.search(payload.query)
    return SearchResponse(
        query=query.original,
        normalized_query=query.normalized,
        results=result_set,
        record_count=result_set.stats.total,
    )


@router.post("/agent/process", response_model=AgentReport)
async def agent_process(
    payload: AgentProcessRequest,
    agent: Annotated[RelevanceAgent, Depends(get_relevance_agent)],
) -> AgentReport:
    """Filter a result set down to the candidates the model judges relevant."""
    if not payload.query or payload.results is None:
        raise InvalidInputError("Invalid input: query and results are required")

    query = normalize(payload.original_query or payload.query)
    report = await agent.analyze(query, payload.results)
    if payload.link_profiles:
        report = link_report(report, payload.results)
    return report


@router.post("/search/report", response_model=ReportResponse)
async def search_report(
    payload: ReportRequest,
    pipeline: Annotated[SearchPipeline, Depends(get_pipeline)],
) -> ReportResponse:
    """Search, then analyze the candidates, in a single request."""
    query, result_set, report = await pipeline.search_and_analyze(payload.query)
    if payload.link_profiles:
        report = link_report(report, result_set)
    return ReportResponse(
        query=query.original,
        normalized_query=query.normalized,
        results=result_set,
        record_count=result_set.stats.total,
        agent_report=report,
    )
