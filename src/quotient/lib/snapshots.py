"""Shareable snapshots of a query, its results and its report.

Snapshots are write-once documents in the ``shared_searches`` index, keyed by
an 8-hex-character id.  ``results`` and ``agent_report`` are stored as JSON
text so the index mapping never depends on their shape; a stored value that
no longer decodes is returned as an error marker instead of failing the read.
"""

import json
import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from elasticsearch import ConflictError, NotFoundError

from ..errors import InvalidInputError, SnapshotNotFoundError, SnapshotStoreError
from ..models import ResultSet, Snapshot
from .elasticsearch import unwrap_es_response

logger = logging.getLogger(__name__)

ID_BYTES = 4
MAX_ID_ATTEMPTS = 3
UNPARSEABLE_RESULTS = {"error": "could not parse results"}
UNPARSEABLE_REPORT = {"error": "could not parse agent report"}


def new_snapshot_id() -> str:
    return secrets.token_hex(ID_BYTES)


def serialize_results(results: ResultSet | dict | None) -> str:
    if isinstance(results, ResultSet):
        return results.model_dump_json(by_alias=True)
    return json.dumps(results)


def _decode_stored(raw, field: str, marker: dict) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Stored snapshot %s could not be parsed", field)
        return dict(marker)


def deserialize_results(raw) -> Any:
    return _decode_stored(raw, "results", UNPARSEABLE_RESULTS)


def deserialize_report(raw) -> Any:
    return _decode_stored(raw, "agent_report", UNPARSEABLE_REPORT)


class SnapshotStore:
    def __init__(self, es, index: str = "shared_searches"):
        self._es = es
        self.index = index

    async def store(self, query: str, results, agent_report) -> str:
        """Persist a snapshot and return its id.

        Raises ``InvalidInputError`` if *query* or *agent_report* is missing.
        *results* may be ``None``.
        """
        if not query or not isinstance(query, str):
            raise InvalidInputError("query is required")
        if agent_report is None or agent_report == "":
            raise InvalidInputError("agentReport is required")

        document = {
            "query": query,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "results": serialize_results(results),
            "agent_report": json.dumps(agent_report),
        }

        for _ in range(MAX_ID_ATTEMPTS):
            snapshot_id = new_snapshot_id()
            try:
                await self._es.index(
                    index=self.index,
                    id=snapshot_id,
                    document={"id": snapshot_id, **document},
                    op_type="create",
                    refresh="wait_for",
                )
            except ConflictError:
                logger.warning("Snapshot id %s already taken, drawing another", snapshot_id)
                continue
            except Exception as exc:
                logger.exception("Failed to store snapshot", extra={"index": self.index})
                raise SnapshotStoreError("Failed to create share link") from exc
            logger.info("Stored snapshot %s for %r", snapshot_id, query)
            return snapshot_id

        raise SnapshotStoreError("Could not allocate a unique snapshot id")

    async def fetch(self, snapshot_id: str) -> Snapshot:
        """Return the snapshot stored under *snapshot_id*.

        Raises ``SnapshotNotFoundError`` if there is none.
        """
        if not snapshot_id:
            raise InvalidInputError("Missing ID parameter")
        try:
            resp = await self._es.get(index=self.index, id=snapshot_id)
        except NotFoundError as exc:
            raise SnapshotNotFoundError("Shared search not found") from exc
        except Exception as exc:
            logger.exception("Failed to read snapshot %s", snapshot_id)
            raise SnapshotStoreError("Failed to retrieve shared search") from exc

        data = unwrap_es_response(resp)
        if not data.get("found", True):
            raise SnapshotNotFoundError("Shared search not found")
        src = data.get("_source") or {}
        return Snapshot(
            id=snapshot_id,
            query=src.get("query") or "",
            timestamp=src.get("timestamp"),
            results=deserialize_results(src.get("results")),
            agent_report=deserialize_report(src.get("agent_report")),
        )
