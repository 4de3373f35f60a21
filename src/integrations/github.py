"""
GitHub webhook events rendered as Slack messages.

Supported events: ping, push, workflow_run (completed), deployment_status.
Every other event maps to None and is not relayed.
"""

import time
from typing import Dict, Any, Optional

from ..models.api_validation import GitHubWebhookPayload

BOT_USERNAME = "TeamCollab Bot"
GITHUB_ICON = "https://github.githubassets.com/favicon.ico"


def _field(title: str, value: str, short: bool = True) -> Dict[str, Any]:
    return {"title": title, "value": value, "short": short}


def _attachment(color: str, fields: list, footer: str) -> Dict[str, Any]:
    return {
        "color": color,
        "fields": fields,
        "footer": footer,
        "footer_icon": GITHUB_ICON,
        "ts": int(time.time()),
    }


def create_ping_message() -> Dict[str, Any]:
    return {
        "text": "GitHub webhook connected successfully!",
        "username": BOT_USERNAME,
        "icon_emoji": ":white_check_mark:",
    }


def create_push_message(payload: GitHubWebhookPayload) -> Dict[str, Any]:
    head_commit = payload.head_commit or {}
    branch = (payload.ref or "").replace("refs/heads/", "") or "unknown"
    author = (
        (payload.pusher or {}).get("name")
        or (head_commit.get("author") or {}).get("name")
        or "Unknown"
    )
    commit_message = head_commit.get("message") or "No commit message"
    commit_url = head_commit.get("url") or ""

    return {
        "text": f"📦 New push - {payload.repository.full_name}",
        "username": BOT_USERNAME,
        "icon_emoji": ":rocket:",
        "attachments": [
            _attachment(
                "#36a64f",
                [
                    _field("Branch", branch),
                    _field("Author", author),
                    _field("Commit", f"<{commit_url}|{commit_message}>", short=False),
                ],
                "TeamCollab Backend",
            )
        ],
    }


def create_workflow_message(payload: GitHubWebhookPayload) -> Optional[Dict[str, Any]]:
    workflow = payload.workflow_run
    if not workflow:
        return None

    head_commit = workflow.get("head_commit") or {}
    is_success = workflow.get("conclusion") == "success"
    emoji = "✅" if is_success else "❌"
    outcome = "succeeded" if is_success else "failed"

    return {
        "text": f"{emoji} {workflow.get('name', 'Workflow')} - {outcome}",
        "username": BOT_USERNAME,
        "icon_emoji": ":tada:" if is_success else ":x:",
        "attachments": [
            _attachment(
                "good" if is_success else "danger",
                [
                    _field("Repository", payload.repository.full_name),
                    _field("Branch", workflow.get("head_branch") or "unknown"),
                    _field("Author", (head_commit.get("author") or {}).get("name") or "Unknown"),
                    _field("Status", "Success ✅" if is_success else "Failed ❌"),
                    _field("Commit", head_commit.get("message") or "", short=False),
                    _field("Workflow", f"<{workflow.get('html_url', '')}|View Details>", short=False),
                ],
                "TeamCollab CI/CD",
            )
        ],
    }


def create_deployment_message(payload: GitHubWebhookPayload) -> Optional[Dict[str, Any]]:
    status = payload.deployment_status
    if not status:
        return None

    state = status.get("state", "unknown")
    if state == "success":
        color, emoji = "good", "✅"
    elif state == "failure":
        color, emoji = "danger", "❌"
    else:
        color, emoji = "warning", "⏳"

    environment = (payload.deployment or {}).get("environment") or "Unknown"
    target_url = status.get("target_url")

    return {
        "text": f"{emoji} Deployment {state} - {environment}",
        "username": BOT_USERNAME,
        "icon_emoji": ":rocket:",
        "attachments": [
            _attachment(
                color,
                [
                    _field("Environment", environment),
                    _field("Status", state),
                    _field("Description", status.get("description") or "No description", short=False),
                    _field(
                        "Details",
                        f"<{target_url}|View Deployment>" if target_url else "No URL",
                        short=False,
                    ),
                ],
                "TeamCollab Deployment",
            )
        ],
    }


def build_slack_message(event: str, payload: GitHubWebhookPayload) -> Optional[Dict[str, Any]]:
    """Slack message for a GitHub event, or None when the event is not relayed."""
    if event == "ping":
        return create_ping_message()
    if event == "push":
        return create_push_message(payload)
    if event == "workflow_run":
        if payload.action != "completed":
            return None
        return create_workflow_message(payload)
    if event == "deployment_status":
        return create_deployment_message(payload)
    return None
