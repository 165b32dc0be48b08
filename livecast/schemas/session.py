"""Stream session schema."""

from datetime import datetime, timedelta

from pydantic import BaseModel, model_validator

from .session_state import QualityProfile, SessionStatus

SESSION_TTL = timedelta(days=7)


class StreamSession(BaseModel):
    """Stored stream session.

    ``access_key`` is persisted with the record but must not leave the service
    through the owner-facing surface; use ``SessionView`` for that.
    """

    session_id: str
    owner_id: str

    # Owner supplied descriptors
    title: str
    description: str | None = None
    quality_profile: QualityProfile = QualityProfile.Q720P

    # Ingest binding
    access_key: str

    status: SessionStatus = SessionStatus.PENDING
    delivery_address: str | None = None

    # Timestamps
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    @model_validator(mode="after")
    def _check_expiry(self) -> "StreamSession":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")
        return self

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class SessionView(BaseModel):
    """Owner-facing projection of a session (no access key)."""

    session_id: str
    owner_id: str
    title: str
    description: str | None = None
    quality_profile: QualityProfile
    status: SessionStatus
    delivery_address: str | None = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    @classmethod
    def from_session(cls, session: StreamSession) -> "SessionView":
        return cls(**session.model_dump(exclude={"access_key"}))
