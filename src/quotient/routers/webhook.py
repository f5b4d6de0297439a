import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from ..dependencies import get_token_store
from ..lib.notifications import NotificationTokenStore, WebhookEvent

router = APIRouter(tags=["webhook"])

logger = logging.getLogger(__name__)


@router.post("/webhook")
async def webhook(
    request: Request,
    store: Annotated[NotificationTokenStore, Depends(get_token_store)],
) -> dict:
    """Record notification-token events from the mini-app host.

    Always answers 200 so the host does not retry; failures are logged and
    reported in the body instead.
    """
    try:
        event = WebhookEvent.model_validate(await request.json())
        outcome = await store.handle(event)
    except (ValueError, ValidationError) as exc:
        logger.warning("Rejected malformed webhook payload: %s", exc)
        return {"success": False, "error": "Malformed webhook payload"}
    except Exception as exc:
        logger.exception("Webhook processing failed")
        return {"success": False, "error": str(exc)}

    logger.info("Webhook event %r for fid %s: %s", event.event, event.fid, outcome)
    return {"success": True}
