"""Shared FastAPI dependencies: payment gateway and document store collaborators."""

from functools import lru_cache

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError
from app.gateways.base import PaymentGateway
from app.storage.base import DocumentStore

PAYMENTS_NOT_CONFIGURED = "Payment backend not fully configured."


@lru_cache(maxsize=4)
def _razorpay_gateway(key_id: str, key_secret: str) -> PaymentGateway:
    from app.gateways.razorpay_gateway import RazorpayGateway
    return RazorpayGateway(key_id, key_secret)


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> PaymentGateway:
    """Dependency: Razorpay gateway, or ConfigurationError before any network call."""
    if not settings.payments_configured:
        raise ConfigurationError(PAYMENTS_NOT_CONFIGURED)
    return _razorpay_gateway(settings.razorpay_key_id, settings.razorpay_key_secret)


def get_document_store(request: Request) -> DocumentStore | None:
    """Dependency: store connected at startup; None when MongoDB is not configured."""
    return getattr(request.app.state, "document_store", None)
