from .slack import SlackIntegration, get_slack_integration
from .github import build_slack_message

__all__ = [
    "SlackIntegration",
    "get_slack_integration",
    "build_slack_message",
]
