"""
Slack slash-command endpoint.

Slack posts form-encoded bodies; JSON bodies are accepted for testing and
for other chat bridges. The response is always HTTP 200 because Slack
shows non-200 replies as a generic failure to the user.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from config import settings
from ..bot.commands import get_slack_command_handler, INTERNAL_ERROR_TEXT
from ..middleware.slowapi_limiter import limiter
from ..models.api_validation import SlackCommandPayload, SlackReply

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slack", tags=["slack"])


async def read_command_payload(request: Request) -> SlackCommandPayload:
    """Parse a slash command from a form or JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        data = await request.json()
    else:
        form = await request.form()
        data = dict(form)
    return SlackCommandPayload.model_validate(data or {})


@router.post("/commands")
@limiter.limit(lambda: settings.slack_rate_limit)
async def slack_commands(request: Request):
    """Handle an attendance slash command."""
    try:
        payload = await read_command_payload(request)
    except (PydanticValidationError, ValueError) as e:
        logger.warning(f"Malformed Slack command payload: {e}")
        return JSONResponse(
            status_code=200,
            content=SlackReply(text="❌ Could not read the command payload.").model_dump(),
        )

    logger.debug(f"Slack command {payload.command!r} text={payload.text!r} from {payload.user_id!r}")

    try:
        reply = await get_slack_command_handler().handle(payload)
    except Exception as e:
        logger.error(f"Error handling Slack command: {e}", exc_info=True)
        reply = SlackReply(text=INTERNAL_ERROR_TEXT)

    return JSONResponse(status_code=200, content=reply.model_dump())
