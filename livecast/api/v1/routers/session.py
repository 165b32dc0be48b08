from fastapi import APIRouter, Depends, Query

from livecast.api.v1.dependency import CurrentOwner
from livecast.api.v1.schemas.base import ApiOut
from livecast.api.v1.schemas.session import (
    CreateSessionIn,
    DeleteSessionOut,
    DeliveryOut,
    IngestOut,
    ListSessionsOut,
    SessionIdIn,
    SessionOut,
    UpdateStatusIn,
)
from livecast.domain.live.session.session_domain import SessionService, get_session_service
from livecast.domain.live.session.session_models import SessionCreateParams
from livecast.utils.app_errors import NotFoundError

router = APIRouter(prefix="/session", tags=["Session"])


@router.post("/create_session")
async def create_session(
    body: CreateSessionIn,
    owner: CurrentOwner,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[SessionOut]:
    """Create a pending session that expires 7 days from now."""
    params = SessionCreateParams(
        owner_id=owner.owner_id,
        title=body.title,
        description=body.description,
        quality_profile=body.quality_profile,
    )

    session = await service.create_session(params)

    return ApiOut[SessionOut](results=SessionOut.from_view(session))


@router.get("/list_sessions")
async def list_sessions(
    owner: CurrentOwner,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[ListSessionsOut]:
    """List the caller's live sessions, newest first."""
    sessions = await service.list_sessions(owner.owner_id)

    return ApiOut[ListSessionsOut](
        results=ListSessionsOut(sessions=[SessionOut.from_view(s) for s in sessions])
    )


@router.get("/get_session")
async def get_session(
    session_id: str = Query(..., description="Session identifier"),
    service: SessionService = Depends(get_session_service),
) -> ApiOut[SessionOut]:
    session = await service.get_session(session_id)
    return ApiOut[SessionOut](results=SessionOut.from_view(session))


@router.post("/update_status")
async def update_status(
    body: UpdateStatusIn,
    owner: CurrentOwner,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[SessionOut]:
    """Apply a status transition; disallowed transitions return 409."""
    session = await service.update_status(body.session_id, body.status, owner_id=owner.owner_id)
    return ApiOut[SessionOut](results=SessionOut.from_view(session))


@router.post("/stop_session")
async def stop_session(
    body: SessionIdIn,
    owner: CurrentOwner,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[SessionOut]:
    """Stop an active session owned by the caller."""
    session = await service.stop_session(body.session_id, owner.owner_id)
    return ApiOut[SessionOut](results=SessionOut.from_view(session))


@router.post("/delete_session")
async def delete_session(
    body: SessionIdIn,
    owner: CurrentOwner,
    service: SessionService = Depends(get_session_service),
) -> ApiOut[DeleteSessionOut]:
    deleted = await service.delete_session(body.session_id, owner.owner_id)
    if not deleted:
        raise NotFoundError(f"Session not found: {body.session_id}")

    return ApiOut[DeleteSessionOut](
        results=DeleteSessionOut(session_id=body.session_id, deleted=True)
    )


@router.get("/get_delivery")
async def get_delivery(
    session_id: str = Query(..., description="Session identifier"),
    service: SessionService = Depends(get_session_service),
) -> ApiOut[DeliveryOut]:
    """Where a viewer should attach; the address is null until the session is active."""
    info = await service.resolve_delivery(session_id)

    return ApiOut[DeliveryOut](
        results=DeliveryOut(
            session_id=info.session_id,
            status=info.status,
            delivery_address=info.delivery_address,
        )
    )


@router.get("/get_ingest")
async def get_ingest(
    owner: CurrentOwner,
    session_id: str = Query(..., description="Session identifier"),
    service: SessionService = Depends(get_session_service),
) -> ApiOut[IngestOut]:
    """Publish endpoint and access key, for the session owner only."""
    info = await service.get_ingest_info(session_id, owner.owner_id)

    return ApiOut[IngestOut](
        results=IngestOut(
            session_id=info.session_id,
            ingest_url=info.ingest_url,
            access_key=info.access_key,
        )
    )
