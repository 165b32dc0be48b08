"""Ingest webhook endpoint.

The ingest collaborator (media server hooks, transcoder supervisor) reports
lifecycle signals keyed by the session's access key:

- feed-detected: a publisher connected (pending -> processing)
- first-segment-ready: the first playable segment exists (processing -> active)
- conversion-failed: transcoding gave up (processing -> error)
- feed-dropped: the publisher went away while live (active -> error)

When INGEST_WEBHOOK_SECRET is configured every request must carry an
``X-Ingest-Signature: t=<unix ts>,v1=<hex hmac>`` header, where the HMAC is
SHA256 over ``"{t}.{raw body}"``.
"""

import hashlib
import hmac
import time

from fastapi import APIRouter, Depends, Header, Request
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from livecast.api.v1.schemas.base import ApiOut
from livecast.api.webhooks.schemas.ingest import IngestWebhookIn
from livecast.app_config import get_app_environ_config
from livecast.domain.live.session.session_domain import SessionService, get_session_service
from livecast.schemas import SessionStatus
from livecast.utils.app_errors import AppErrorCode, ForbiddenError, ValidationError

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def sign_ingest_payload(payload: bytes, signing_secret: str, timestamp: int) -> str:
    """Build the header value a sender attaches to ``payload``."""
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    digest = hmac.new(
        signing_secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={digest}"


def verify_ingest_signature(
    payload: bytes,
    signature_header: str,
    signing_secret: str,
    tolerance_seconds: int = 300,
    now: int | None = None,
) -> bool:
    """Verify an ingest webhook signature using HMAC SHA256.

    Returns:
        True if the signature matches

    Raises:
        ForbiddenError: If the header is malformed or the timestamp is outside tolerance
    """
    # Format: t=1565220904,v1=20c75c1180c701...
    elements = {}
    for element in signature_header.split(","):
        if "=" not in element:
            continue
        key, value = element.split("=", 1)
        elements[key.strip()] = value.strip()

    if "t" not in elements or "v1" not in elements:
        raise ForbiddenError(
            "Invalid signature header format - missing t or v1",
            errcode=AppErrorCode.E_WEBHOOK_INVALID_SIGNATURE,
        )

    timestamp_str = elements["t"]
    received_signature = elements["v1"]

    try:
        timestamp = int(timestamp_str)
    except ValueError as exc:
        raise ForbiddenError(
            f"Invalid timestamp in signature: {timestamp_str}",
            errcode=AppErrorCode.E_WEBHOOK_INVALID_SIGNATURE,
        ) from exc

    # Replay protection
    current_time = int(time.time()) if now is None else now
    if abs(current_time - timestamp) > tolerance_seconds:
        raise ForbiddenError(
            f"Timestamp outside tolerance window: received={timestamp}, "
            f"current={current_time}, diff={abs(current_time - timestamp)}s",
            errcode=AppErrorCode.E_WEBHOOK_INVALID_SIGNATURE,
        )

    expected = sign_ingest_payload(payload, signing_secret, timestamp).split("v1=", 1)[1]

    return hmac.compare_digest(expected, received_signature)


@router.post("/ingest")
async def ingest_webhook(
    request: Request,
    ingest_signature: str | None = Header(None, alias="X-Ingest-Signature"),
    service: SessionService = Depends(get_session_service),
) -> ApiOut[dict[str, str]]:
    """Apply one ingest signal to the session bound to its access key.

    Unknown keys return 404, signals that do not fit the session's current
    status return 409.
    """
    body = await request.body()
    logger.debug(
        "Received ingest webhook: body_length={}, has_signature={}",
        len(body),
        bool(ingest_signature),
    )

    config = get_app_environ_config()
    signing_secret = config.INGEST_WEBHOOK_SECRET

    if signing_secret:
        if not ingest_signature:
            raise ForbiddenError(
                "Missing X-Ingest-Signature header",
                errcode=AppErrorCode.E_WEBHOOK_INVALID_SIGNATURE,
            )
        is_valid = verify_ingest_signature(
            payload=body,
            signature_header=ingest_signature,
            signing_secret=signing_secret,
            tolerance_seconds=config.INGEST_WEBHOOK_TOLERANCE_SECONDS,
        )
        if not is_valid:
            raise ForbiddenError(
                "Invalid webhook signature",
                errcode=AppErrorCode.E_WEBHOOK_INVALID_SIGNATURE,
            )
        logger.debug("Ingest webhook signature verified")

    try:
        payload = IngestWebhookIn.model_validate_json(body)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid ingest payload: {exc.errors(include_url=False)}") from exc

    session = await service.apply_ingest_event(payload.access_key, payload.event)

    results = {
        "session_id": session.session_id,
        "event": payload.event.value,
        "status": str(session.status),
    }
    if session.status == SessionStatus.ACTIVE and session.delivery_address:
        results["delivery_address"] = session.delivery_address

    return ApiOut[dict[str, str]](results=results)
