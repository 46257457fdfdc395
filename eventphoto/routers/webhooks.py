"""Webhooks router - inbound calls from the compute service and the payment provider."""

import json
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from eventphoto.core.config import settings
from eventphoto.core.deps import get_db
from eventphoto.core.exceptions import Unauthorized
from eventphoto.core.rate_limit import limiter
from eventphoto.core.security import verify_secret
from eventphoto.schemas.photo import FaceMatchingResult, FaceMatchingTaskRead
from eventphoto.services import billing_service, face_matching_service

router = APIRouter()
logger = logging.getLogger(__name__)

COMPUTE_SECRET_HEADER = "X-Compute-Secret"
BILLING_SIGNATURE_HEADER = "Stripe-Signature"
MAX_PAYLOAD_BYTES = 1 * 1024 * 1024  # 1 MB


def require_compute_secret(request: Request) -> None:
    if not verify_secret(request.headers.get(COMPUTE_SECRET_HEADER), settings.COMPUTE_CALLBACK_SECRET):
        logger.warning("Compute callback with invalid secret")
        raise Unauthorized("Invalid compute secret")


async def _read_body_safe(request: Request) -> bytes:
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            if int(content_length) > MAX_PAYLOAD_BYTES:
                raise HTTPException(413, "Payload too large")
        except ValueError:
            pass

    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        if not chunk:
            continue
        total += len(chunk)
        if total > MAX_PAYLOAD_BYTES:
            raise HTTPException(413, "Payload too large")
        chunks.append(chunk)
    return b"".join(chunks)


@router.post(
    "/face-matching/{task_id}",
    response_model=FaceMatchingTaskRead,
    dependencies=[Depends(require_compute_secret)],
)
@limiter.exempt
def receive_face_matching_result(
    task_id: UUID,
    body: FaceMatchingResult,
    db: Session = Depends(get_db),
):
    """
    Status report from the compute service.

    Redelivering the same status is a no-op; an illegal transition is 409.
    """
    return face_matching_service.report_result(db, task_id, body)


@router.post("/billing")
@limiter.exempt
async def receive_billing_webhook(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Payment provider notifications.

    Security:
    - Validates the `t=...,v1=...` HMAC signature header
    - Rejects timestamps outside BILLING_WEBHOOK_TOLERANCE_SECONDS
    """
    body = await _read_body_safe(request)

    if not settings.BILLING_WEBHOOK_SECRET:
        logger.error("BILLING_WEBHOOK_SECRET not configured")
        raise HTTPException(500, "Webhook not configured")

    if not billing_service.verify_signature(
        body,
        request.headers.get(BILLING_SIGNATURE_HEADER),
        settings.BILLING_WEBHOOK_SECRET,
        settings.BILLING_WEBHOOK_TOLERANCE_SECONDS,
    ):
        logger.warning("Billing webhook invalid signature")
        raise HTTPException(400, "Invalid signature")

    try:
        event = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(400, "Invalid JSON")
    if not isinstance(event, dict):
        raise HTTPException(400, "Invalid JSON")

    applied = billing_service.handle_event(db, event)
    return {"status": "ok", "applied": applied}
