"""Session domain models."""

from pydantic import BaseModel

from livecast.schemas import QualityProfile, SessionStatus


class SessionCreateParams(BaseModel):
    """Parameters for creating a session."""

    owner_id: str
    title: str
    description: str | None = None
    quality_profile: QualityProfile = QualityProfile.Q720P


class DeliveryInfo(BaseModel):
    """Delivery resolution for a session; the address is set only while ACTIVE."""

    session_id: str
    status: SessionStatus
    delivery_address: str | None = None


class IngestInfo(BaseModel):
    """Where and with which key the owner's encoder should publish."""

    session_id: str
    ingest_url: str
    access_key: str
