"""Domain and API payload models."""

from .attendance import (
    AttendanceStatus,
    AttendanceRecord,
    AttendanceListItem,
    MonthlyAggregate,
    TodayAggregate,
    UserIdentity,
    status_label,
    unassigned_department,
)
from .api_validation import SlackCommandPayload, SlackReply, GitHubWebhookPayload

__all__ = [
    "AttendanceStatus",
    "AttendanceRecord",
    "AttendanceListItem",
    "MonthlyAggregate",
    "TodayAggregate",
    "UserIdentity",
    "status_label",
    "unassigned_department",
    "SlackCommandPayload",
    "SlackReply",
    "GitHubWebhookPayload",
]
