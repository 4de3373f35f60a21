"""
Slack incoming-webhook integration.

Posts relay notifications (GitHub pushes, CI runs, deployments) to the
configured Slack channel webhook.
"""

import asyncio
import logging
from typing import Dict, Any, Optional

import aiohttp

from config import settings
from ..monitoring.prometheus import slack_messages_sent

logger = logging.getLogger(__name__)


class SlackIntegration:
    """Handles outbound Slack webhook messages."""

    def __init__(self, webhook_url: Optional[str] = None, timeout_seconds: float = 10.0):
        self.webhook_url = webhook_url if webhook_url is not None else settings.slack_webhook_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    async def send_message(self, payload: Dict[str, Any], source: str = "relay") -> bool:
        """
        Post a message payload to the Slack webhook.

        Failures are logged and reported as False; they never raise.
        """
        if not self.webhook_url:
            logger.warning("SLACK_WEBHOOK_URL not configured, skipping Slack message")
            return False

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    if response.status == 200:
                        logger.info(f"Sent Slack message ({source})")
                        slack_messages_sent.labels(source=source, status="sent").inc()
                        return True

                    error = await response.text()
                    logger.error(f"Slack webhook error: {response.status} - {error}")
                    slack_messages_sent.labels(source=source, status="rejected").inc()
                    return False

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error sending Slack message: {e}")
            slack_messages_sent.labels(source=source, status="failed").inc()
            return False


# Singleton
_slack_integration: Optional[SlackIntegration] = None


def get_slack_integration() -> SlackIntegration:
    """Get the Slack integration instance."""
    global _slack_integration
    if _slack_integration is None:
        _slack_integration = SlackIntegration()
    return _slack_integration
