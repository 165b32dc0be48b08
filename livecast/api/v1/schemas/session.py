from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from livecast.schemas import QualityProfile, SessionStatus, SessionView

from .serializers import serialize_utc_datetime


class CreateSessionIn(BaseModel):
    title: str = Field(description="Title shown to viewers, must not be blank")
    description: str | None = Field(default=None, description="Free text description")
    quality_profile: QualityProfile = Field(
        default=QualityProfile.Q720P, description="Requested output quality"
    )


class SessionIdIn(BaseModel):
    session_id: str = Field(description="Session identifier")


class UpdateStatusIn(BaseModel):
    session_id: str = Field(description="Session identifier")
    status: SessionStatus = Field(description="Target status")


class SessionOut(BaseModel):
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

    @field_serializer("created_at", "updated_at", "expires_at")
    def serialize_datetime(self, v: datetime) -> str:
        return serialize_utc_datetime(v)

    @classmethod
    def from_view(cls, view: SessionView) -> "SessionOut":
        return cls(**view.model_dump())


class ListSessionsOut(BaseModel):
    sessions: list[SessionOut]


class DeleteSessionOut(BaseModel):
    session_id: str
    deleted: bool


class DeliveryOut(BaseModel):
    session_id: str
    status: SessionStatus
    delivery_address: str | None = Field(
        default=None, description="Playback address, present only while the session is active"
    )


class IngestOut(BaseModel):
    session_id: str
    ingest_url: str
    access_key: str = Field(description="Secret publish key, keep private")
