from .commands import SlackCommandHandler, get_slack_command_handler

__all__ = ["SlackCommandHandler", "get_slack_command_handler"]
