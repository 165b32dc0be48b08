"""Ingest webhook payload schemas."""

from pydantic import BaseModel, Field

from livecast.domain.live.session.session_state_machine import IngestEvent


class IngestWebhookIn(BaseModel):
    """Signal reported by the ingest collaborator for one publish key."""

    access_key: str = Field(min_length=1)
    event: IngestEvent
