"""Notification-token bookkeeping for mini-app webhook events.

``frame_added`` and ``notifications_enabled`` store the token a client hands
us; ``frame_removed`` and ``notifications_disabled`` forget every token for
the user.  Delivering notifications is somebody else's job.
"""

import hashlib
import logging
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from .elasticsearch import unwrap_es_response

logger = logging.getLogger(__name__)

STORE_EVENTS = frozenset({"frame_added", "notifications_enabled"})
REMOVE_EVENTS = frozenset({"frame_removed", "notifications_disabled"})


class NotificationDetails(BaseModel):
    token: str
    url: str


class WebhookEvent(BaseModel):
    event: str
    fid: int | None = None
    notification_details: NotificationDetails | None = Field(
        None, alias="notificationDetails"
    )


def token_doc_id(fid: int, token: str) -> str:
    """Stable document id per (user, token) so re-adding is an upsert."""
    return hashlib.sha256(f"{fid}:{token}".encode()).hexdigest()


class NotificationTokenStore:
    def __init__(self, es, index: str = "notification_tokens"):
        self._es = es
        self.index = index

    async def upsert(self, fid: int, token: str, url: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        await self._es.update(
            index=self.index,
            id=token_doc_id(fid, token),
            doc={"fid": fid, "token": token, "url": url, "updated_at": now},
            upsert={"fid": fid, "token": token, "url": url, "created_at": now, "updated_at": now},
        )

    async def remove_all(self, fid: int) -> int:
        resp = await self._es.delete_by_query(
            index=self.index,
            query={"term": {"fid": fid}},
            refresh=True,
        )
        return unwrap_es_response(resp).get("deleted", 0)

    async def handle(self, event: WebhookEvent) -> str:
        """Apply *event* and return a short description of what happened."""
        if event.fid is None:
            return "ignored: no fid"

        if event.event in STORE_EVENTS:
            if event.notification_details is None:
                return "ignored: no notification details"
            await self.upsert(
                event.fid, event.notification_details.token, event.notification_details.url
            )
            logger.info("Stored notification token for fid %s", event.fid)
            return "stored"

        if event.event in REMOVE_EVENTS:
            deleted = await self.remove_all(event.fid)
            logger.info("Removed %d notification tokens for fid %s", deleted, event.fid)
            return "removed"

        logger.info("Ignoring webhook event %r", event.event)
        return "ignored"
