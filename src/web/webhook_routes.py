"""
GitHub webhook endpoint.

Relays push, CI workflow and deployment events to Slack. Unsupported
events are acknowledged and ignored.
"""

import logging

from fastapi import APIRouter, Request, HTTPException
from pydantic import ValidationError as PydanticValidationError

from ..integrations.github import build_slack_message
from ..integrations.slack import get_slack_integration
from ..models.api_validation import GitHubWebhookPayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post("/github")
async def github_webhook(request: Request):
    """
    GitHub webhook endpoint.

    Headers:
        X-GitHub-Event: event name (push, workflow_run, ...)
        X-GitHub-Delivery: delivery id, echoed back for tracing
    """
    event = request.headers.get("x-github-event", "")
    delivery = request.headers.get("x-github-delivery")

    try:
        payload = GitHubWebhookPayload.model_validate(await request.json())
    except (PydanticValidationError, ValueError) as e:
        logger.warning(f"Invalid GitHub webhook payload (delivery={delivery}): {e}")
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    logger.info(f"GitHub webhook received: event={event} delivery={delivery}")

    message = build_slack_message(event, payload)
    if message is None:
        logger.info(f"Ignoring GitHub event {event!r}")
        return {"message": "Event ignored", "event": event, "delivery": delivery}

    sent = await get_slack_integration().send_message(message, source=f"github_{event}")
    return {
        "message": "Webhook processed" if sent else "Webhook processed, Slack delivery failed",
        "event": event,
        "delivery": delivery,
    }
