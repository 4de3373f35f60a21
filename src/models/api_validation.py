"""
Pydantic models for inbound webhook and command payload validation.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# ============================================
# SLACK
# ============================================

class SlackCommandPayload(BaseModel):
    """
    Slack slash command payload (subset of fields).

    Slack posts form fields named user_id/user_name; JSON callers may use
    userExternalId/userDisplayName instead.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    command: str = Field("", max_length=100)
    text: str = Field("", max_length=4000)
    user_id: str = Field("", alias="userExternalId", max_length=50)
    user_name: Optional[str] = Field(None, alias="userDisplayName", max_length=100)
    channel_id: Optional[str] = None
    channel_name: Optional[str] = None
    team_id: Optional[str] = None
    response_url: Optional[str] = None


class SlackReply(BaseModel):
    """Reply body Slack renders for a slash command."""
    text: str
    response_type: str = "ephemeral"


# ============================================
# GITHUB
# ============================================

class GitHubRepository(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    full_name: str = ""


class GitHubWebhookPayload(BaseModel):
    """GitHub webhook payload (subset used for Slack relaying)."""
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    ref: Optional[str] = None
    repository: GitHubRepository = Field(default_factory=GitHubRepository)
    pusher: Optional[dict] = None
    head_commit: Optional[dict] = None
    workflow_run: Optional[dict] = None
    deployment: Optional[dict] = None
    deployment_status: Optional[dict] = None
