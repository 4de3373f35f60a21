"""
Tests for the Slack attendance command handler (src/bot/commands.py).
"""

import pytest
from unittest.mock import AsyncMock

from src.bot.commands import (
    SlackCommandHandler,
    resolve_command,
    NOT_REGISTERED_TEXT,
    INTERNAL_ERROR_TEXT,
    CHECKIN,
    CHECKOUT,
    ATTENDANCE,
)
from src.models.api_validation import SlackCommandPayload, SlackReply


@pytest.fixture
def handler(service, user_repo):
    return SlackCommandHandler(service=service, user_repo=user_repo)


def payload(command="/teamcollab", text="", user_id="U001"):
    return SlackCommandPayload(command=command, text=text, user_id=user_id, user_name="alice")


class TestResolveCommand:

    @pytest.mark.parametrize("command,text,expected", [
        ("/checkin", "", (CHECKIN, "")),
        ("/checkout", "", (CHECKOUT, "")),
        ("/attendance", "2025-01-15", (ATTENDANCE, "2025-01-15")),
        ("/teamcollab", "checkin", (CHECKIN, "")),
        ("/teamcollab", "CheckOut", (CHECKOUT, "")),
        ("/teamcollab", "attendance 2025-01-15", (ATTENDANCE, "2025-01-15")),
        ("/teamcollab", "출근", (CHECKIN, "")),
        ("/teamcollab", "퇴근", (CHECKOUT, "")),
        ("/teamcollab", "근태 2025-01-15", (ATTENDANCE, "2025-01-15")),
        ("", "checkin", (CHECKIN, "")),
    ])
    def test_known_commands(self, command, text, expected):
        assert resolve_command(command, text) == expected

    def test_unknown_subcommand(self):
        assert resolve_command("/teamcollab", "dance")[0] is None

    def test_umbrella_without_text(self):
        assert resolve_command("/teamcollab", "") == (None, "")


class TestSlackCommandHandler:

    @pytest.mark.asyncio
    async def test_checkin(self, handler, attendance_repo):
        reply = await handler.handle(payload("/checkin"))

        assert isinstance(reply, SlackReply)
        assert reply.response_type == "ephemeral"
        assert "checked in at 09:00" in reply.text
        assert len(attendance_repo.records) == 1

    @pytest.mark.asyncio
    async def test_korean_alias_checkin(self, handler, attendance_repo):
        reply = await handler.handle(payload(text="출근"))

        assert "checked in" in reply.text
        assert len(attendance_repo.records) == 1

    @pytest.mark.asyncio
    async def test_checkout(self, handler, clock):
        await handler.handle(payload(text="checkin"))
        clock.advance(hours=9, minutes=30)

        reply = await handler.handle(payload(text="checkout"))

        assert "checked out at 18:30" in reply.text
        assert "9h 30m" in reply.text

    @pytest.mark.asyncio
    async def test_double_checkin_reports_error_in_text(self, handler):
        await handler.handle(payload("/checkin"))

        reply = await handler.handle(payload("/checkin"))

        assert reply.text == "❌ Already checked in today"

    @pytest.mark.asyncio
    async def test_checkout_without_checkin(self, handler):
        reply = await handler.handle(payload("/checkout"))

        assert reply.text == "❌ No check-in record for today"

    @pytest.mark.asyncio
    async def test_unregistered_user_is_not_mutated(self, handler, attendance_repo):
        reply = await handler.handle(payload("/checkin", user_id="U999"))

        assert reply.text == NOT_REGISTERED_TEXT
        assert attendance_repo.records == {}

    @pytest.mark.asyncio
    async def test_inactive_user_is_unregistered(self, handler, attendance_repo):
        reply = await handler.handle(payload("/checkin", user_id="U003"))

        assert reply.text == NOT_REGISTERED_TEXT
        assert attendance_repo.records == {}

    @pytest.mark.asyncio
    async def test_attendance_for_missing_day(self, handler, attendance_repo):
        reply = await handler.handle(payload(text="attendance 2025-01-15"))

        assert "No attendance record for 2025-01-15" in reply.text
        assert attendance_repo.records == {}

    @pytest.mark.asyncio
    async def test_attendance_defaults_to_today(self, handler):
        await handler.handle(payload("/checkin"))

        reply = await handler.handle(payload("/attendance"))

        assert "2025-01-15" in reply.text
        assert "Check-in: 09:00" in reply.text
        assert "Check-out: -" in reply.text
        assert "Status: Present" in reply.text

    @pytest.mark.asyncio
    async def test_unknown_command_returns_help(self, handler, attendance_repo):
        reply = await handler.handle(payload(text="dance"))

        assert "Available attendance commands" in reply.text
        assert attendance_repo.records == {}

    @pytest.mark.asyncio
    async def test_internal_error_is_carried_in_text(self, user_repo):
        service = AsyncMock()
        service.check_in = AsyncMock(side_effect=RuntimeError("boom"))
        handler = SlackCommandHandler(service=service, user_repo=user_repo)

        reply = await handler.handle(payload("/checkin"))

        assert reply.text == INTERNAL_ERROR_TEXT


class TestSlackCommandPayload:

    def test_json_aliases(self):
        parsed = SlackCommandPayload.model_validate({
            "command": "/checkin",
            "userExternalId": "U001",
            "userDisplayName": "alice",
        })

        assert parsed.user_id == "U001"
        assert parsed.user_name == "alice"

    def test_slack_form_field_names(self):
        parsed = SlackCommandPayload.model_validate({
            "command": "/checkin",
            "user_id": "U001",
            "user_name": "alice",
            "token": "ignored",
        })

        assert parsed.user_id == "U001"
        assert parsed.text == ""
