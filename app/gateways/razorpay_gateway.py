"""Razorpay orders API behind the PaymentGateway interface."""

from typing import Any

import razorpay
from razorpay.errors import BadRequestError, GatewayError, ServerError
from requests import RequestException
from starlette.concurrency import run_in_threadpool

from app.core.exceptions import UpstreamError
from app.core.logging import get_logger
from app.gateways.base import PaymentGateway

log = get_logger(__name__)

ORDER_FAILED = "Failed to create Razorpay order."

_ERROR_CODES = {
    BadRequestError: "BAD_REQUEST_ERROR",
    GatewayError: "GATEWAY_ERROR",
    ServerError: "SERVER_ERROR",
}


class RazorpayGateway(PaymentGateway):
    def __init__(self, key_id: str, key_secret: str, client: Any = None) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.client = client or razorpay.Client(auth=(key_id, key_secret))

    async def create_order(self, amount: int, currency: str, receipt: str, notes: dict[str, str]) -> dict[str, Any]:
        data = {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes}
        try:
            # SDK is blocking (requests)
            return await run_in_threadpool(self.client.order.create, data)
        except (BadRequestError, GatewayError, ServerError) as exc:
            log.warning("razorpay_order_failed", receipt=receipt, error=str(exc))
            raise UpstreamError(ORDER_FAILED, details=str(exc) or None, code=_error_code(exc)) from exc
        except RequestException as exc:
            log.warning("razorpay_unreachable", receipt=receipt, error=str(exc))
            raise UpstreamError(ORDER_FAILED, details=str(exc) or None) from exc


def _error_code(exc: Exception) -> str:
    for cls, code in _ERROR_CODES.items():
        if isinstance(exc, cls):
            return code
    return "UPSTREAM_ERROR"
