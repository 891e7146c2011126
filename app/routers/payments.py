from typing import Any

from fastapi import APIRouter, Depends, Request

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError, ValidationError
from app.core.logging import get_logger
from app.deps import get_document_store, get_payment_gateway
from app.gateways.base import PaymentGateway
from app.services import payments as payments_service
from app.storage.base import DocumentStore

router = APIRouter()
log = get_logger(__name__)

ENDPOINT_INFO = "Razorpay API endpoint for EduSource. Send POST requests with 'action' in body."


@router.get("/razorpay")
async def razorpay_info():
    """Informational response for non-POST callers."""
    return {"message": ENDPOINT_INFO}


@router.post("/razorpay")
async def razorpay_action(
    request: Request,
    gateway: PaymentGateway = Depends(get_payment_gateway),
    store: DocumentStore | None = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    """Dispatch on ``action``: create_order | verify_payment."""
    body = await _json_object(request)
    action = body.get("action")
    log.info("razorpay_action", action=action)

    if action == "create_order":
        req = payments_service.parse_create_order(body)
        return await payments_service.create_order(gateway, req)
    if action == "verify_payment":
        req = payments_service.parse_verify_payment(body)
        payments_service.require_verify_details(req)
        if store is None:
            raise ConfigurationError("Enrollment store not configured.", field="message")
        return await payments_service.verify_payment(
            gateway, store, req, default_currency=settings.enrollment_currency
        )
    log.warning("invalid_action", action=action)
    raise ValidationError("Invalid action specified.")


async def _json_object(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid request body format.") from exc
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body format.")
    return body
