"""Share router – write-once snapshots behind short ids.

POST /share
    Store a query, its results and its report; return the id.

GET /share/{snapshot_id}
    Read a stored snapshot.  Open to anyone holding the id.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import Field

from ..dependencies import get_snapshot_store
from ..lib.snapshots import SnapshotStore
from ..models import ResultSet, Snapshot, WireModel
from ..security import verify_api_key

router = APIRouter(tags=["share"])


class ShareRequest(WireModel):
    query: str | None = None
    results: ResultSet | None = None
    agent_report: Any = Field(None, description="The report as shown to the user")


class ShareResponse(WireModel):
    id: str


@router.post(
    "/share", response_model=ShareResponse, dependencies=[Depends(verify_api_key)]
)
async def create_share(
    payload: ShareRequest,
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
) -> ShareResponse:
    snapshot_id = await store.store(payload.query, payload.results, payload.agent_report)
    return ShareResponse(id=snapshot_id)


@router.get("/share/{snapshot_id}", response_model=Snapshot)
async def read_share(
    snapshot_id: str,
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
) -> Snapshot:
    return await store.fetch(snapshot_id)
