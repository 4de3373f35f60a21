"""
Slack slash-command handling for attendance.

Maps a slash command and the calling Slack identity onto the attendance
service. Replies are always a SlackReply; the HTTP status stays 200 and
logical failures are carried in the reply text.
"""

import logging
from typing import Optional, Tuple

from config import settings
from ..database.repositories.users import UserRepository, get_user_repository
from ..models.api_validation import SlackCommandPayload, SlackReply
from ..monitoring.prometheus import slack_commands_total
from ..services.attendance import AttendanceService, get_attendance_service
from ..services.exceptions import AttendanceError
from ..utils.datetime_utils import find_day

logger = logging.getLogger(__name__)

CHECKIN = "checkin"
CHECKOUT = "checkout"
ATTENDANCE = "attendance"

COMMAND_ALIASES = {
    "checkin": CHECKIN,
    "check-in": CHECKIN,
    "출근": CHECKIN,
    "checkout": CHECKOUT,
    "check-out": CHECKOUT,
    "퇴근": CHECKOUT,
    "attendance": ATTENDANCE,
    "근태": ATTENDANCE,
}

NOT_REGISTERED_TEXT = (
    "❌ Your Slack account is not linked to a TeamCollab user. "
    "Ask an administrator to register your Slack ID."
)
INTERNAL_ERROR_TEXT = "⚠️ Something went wrong while handling the command. Please try again."


def resolve_command(command: str, text: str) -> Tuple[Optional[str], str]:
    """
    Work out which attendance command was meant and the remaining text.

    `/checkin` style commands map directly; the umbrella command
    (settings.slack_command) takes the subcommand from the first word.
    """
    name = (command or "").strip().lower().lstrip("/")
    args = (text or "").strip()

    umbrella = settings.slack_command.strip().lower().lstrip("/")
    if name == umbrella or not name:
        parts = args.split(None, 1)
        if not parts:
            return None, ""
        name = parts[0].lower().lstrip("/")
        args = parts[1] if len(parts) > 1 else ""

    return COMMAND_ALIASES.get(name), args


def help_text() -> str:
    umbrella = settings.slack_command
    return (
        "*Available attendance commands:*\n\n"
        f"• `{umbrella} checkin` (or `/checkin`, `출근`) → check in for today\n"
        f"• `{umbrella} checkout` (or `/checkout`, `퇴근`) → check out for today\n"
        f"• `{umbrella} attendance [YYYY-MM-DD]` (or `/attendance`, `근태`) → "
        "one day's record, today by default"
    )


class SlackCommandHandler:
    """
    Handles attendance slash commands.

    Commands:
    - checkin - Open today's record
    - checkout - Close today's record
    - attendance [YYYY-MM-DD] - Show one day's record
    """

    def __init__(
        self,
        service: Optional[AttendanceService] = None,
        user_repo: Optional[UserRepository] = None,
    ):
        self.service = service or get_attendance_service()
        self.users = user_repo or get_user_repository()

    async def handle(self, payload: SlackCommandPayload) -> SlackReply:
        """Dispatch one slash command. Never raises."""
        command, args = resolve_command(payload.command, payload.text)
        label = command or "help"

        if command is None:
            slack_commands_total.labels(command=label, outcome="help").inc()
            return SlackReply(text=help_text())

        try:
            user = await self.users.get_by_slack_id(payload.user_id)
            if user is None:
                logger.info(f"Slack command from unregistered user {payload.user_id!r}")
                slack_commands_total.labels(command=label, outcome="unregistered").inc()
                return SlackReply(text=NOT_REGISTERED_TEXT)

            if command == CHECKIN:
                text = await self.handle_checkin(user.id, user.name)
            elif command == CHECKOUT:
                text = await self.handle_checkout(user.id, user.name)
            else:
                text = await self.handle_attendance(user.id, args)

        except AttendanceError as e:
            slack_commands_total.labels(command=label, outcome="rejected").inc()
            return SlackReply(text=f"❌ {e.message}")
        except Exception as e:
            logger.error(f"Slack command {label} failed for {payload.user_id!r}: {e}", exc_info=True)
            slack_commands_total.labels(command=label, outcome="error").inc()
            return SlackReply(text=INTERNAL_ERROR_TEXT)

        slack_commands_total.labels(command=label, outcome="success").inc()
        return SlackReply(text=text)

    async def handle_checkin(self, user_id: int, user_name: str) -> str:
        result = await self.service.check_in(user_id)
        return f"✅ *{user_name}* checked in at {result['checkIn']} ({result['date']})"

    async def handle_checkout(self, user_id: int, user_name: str) -> str:
        result = await self.service.check_out(user_id)
        return (
            f"👋 *{user_name}* checked out at {result['checkOut']}\n"
            f"Worked: {result['workHours']}"
        )

    async def handle_attendance(self, user_id: int, args: str) -> str:
        day = find_day(args)
        report = await self.service.get_day_report(user_id, day)
        return (
            f"📅 *Attendance {report['date']}*\n"
            f"• Check-in: {report['checkIn']}\n"
            f"• Check-out: {report['checkOut']}\n"
            f"• Work hours: {report['workHours']}\n"
            f"• Status: {report['status']}"
        )


# Singleton
_slack_command_handler: Optional[SlackCommandHandler] = None


def get_slack_command_handler() -> SlackCommandHandler:
    """Get the Slack command handler instance."""
    global _slack_command_handler
    if _slack_command_handler is None:
        _slack_command_handler = SlackCommandHandler()
    return _slack_command_handler
