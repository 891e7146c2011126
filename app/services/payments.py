"""Razorpay order creation and payment verification with idempotent course enrollment."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import (
    AuthenticityError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.core.logging import get_logger
from app.core.security import generate_receipt, verify_payment_signature
from app.gateways.base import PaymentGateway
from app.models.enrollment import EnrollmentRecord, enrollment_id
from app.storage.base import DocumentStore

log = get_logger(__name__)

# Smallest payable amount in minor units (₹1)
MIN_AMOUNT = 100

STATUS_SUCCESS = "success"
STATUS_ALREADY_ENROLLED = "already_enrolled"

MSG_ORDER_MISSING = "Missing required details for order creation."
MSG_AMOUNT_TOO_LOW = "Amount must be at least ₹1 (100 paisa)."
MSG_VERIFY_MISSING = "Missing payment verification details."
MSG_SIGNATURE_FAILED = "Payment signature verification failed."
MSG_COURSE_NOT_FOUND = "Course not found for enrollment."
MSG_ALREADY_ENROLLED = "You are already enrolled in this course."
MSG_ENROLLED = "Payment successful and course enrolled!"
MSG_VERIFY_FAILED = "Internal server error during verification."


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: int | None = None  # paise
    currency: str | None = None
    courseId: str | None = None
    userId: str | None = None


class VerifyPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    razorpay_payment_id: str | None = None
    razorpay_order_id: str | None = None
    razorpay_signature: str | None = None
    courseId: str | None = None
    courseTitle: str | None = None
    userId: str | None = None


def parse_create_order(body: dict[str, Any]) -> CreateOrderRequest:
    try:
        return CreateOrderRequest.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError(MSG_ORDER_MISSING, details=_first_error(exc)) from exc


def parse_verify_payment(body: dict[str, Any]) -> VerifyPaymentRequest:
    try:
        return VerifyPaymentRequest.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError(MSG_VERIFY_MISSING, details=_first_error(exc), field="message") from exc


def require_verify_details(req: VerifyPaymentRequest) -> None:
    """Raise before any store or signature work if a checkout field is absent."""
    if not (
        req.razorpay_payment_id
        and req.razorpay_order_id
        and req.razorpay_signature
        and req.courseId
        and req.courseTitle
        and req.userId
    ):
        log.warning("verify_missing_details", order_id=req.razorpay_order_id, payment_id=req.razorpay_payment_id)
        raise ValidationError(MSG_VERIFY_MISSING, field="message")


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


async def create_order(gateway: PaymentGateway, req: CreateOrderRequest) -> dict[str, Any]:
    """Create a Razorpay order tagged with course/user notes; nothing is stored locally."""
    if not req.amount or not req.currency or not req.courseId or not req.userId:
        log.warning("order_missing_details", course_id=req.courseId, user_id=req.userId)
        raise ValidationError(MSG_ORDER_MISSING)
    if req.amount < MIN_AMOUNT:
        log.warning("order_amount_too_low", amount=req.amount)
        raise ValidationError(MSG_AMOUNT_TOO_LOW)

    receipt = generate_receipt()
    order = await gateway.create_order(
        req.amount,
        req.currency,
        receipt,
        {"courseId": req.courseId, "userId": req.userId},
    )
    log.info("order_created", order_id=order["id"], receipt=receipt, course_id=req.courseId, user_id=req.userId)
    return {
        "success": True,
        "orderId": order["id"],
        "amount": req.amount,
        "currency": req.currency,
    }


async def verify_payment(
    gateway: PaymentGateway,
    store: DocumentStore,
    req: VerifyPaymentRequest,
    default_currency: str = "INR",
) -> dict[str, Any]:
    """
    Verify the checkout signature, then enroll the user in the course.
    Idempotent: a user already in ``enrolledUsers`` gets ``already_enrolled`` and nothing is written;
    the enrollment record id is derived from order+payment so a racing duplicate cannot append twice.
    """
    require_verify_details(req)
    payment_id = req.razorpay_payment_id
    order_id = req.razorpay_order_id
    signature = req.razorpay_signature

    if not verify_payment_signature(gateway.key_secret, order_id, payment_id, signature):
        log.warning("signature_mismatch", order_id=order_id)
        raise AuthenticityError(MSG_SIGNATURE_FAILED)
    log.info("signature_verified", order_id=order_id, payment_id=payment_id)

    try:
        course = await store.get_course(req.courseId)
    except PersistenceError as exc:
        raise PersistenceError(MSG_VERIFY_FAILED, details=exc.details or exc.message, field="message") from exc
    if course is None:
        log.warning("course_not_found", course_id=req.courseId)
        raise NotFoundError(MSG_COURSE_NOT_FOUND, field="message")

    if course.is_enrolled(req.userId):
        log.info("already_enrolled", course_id=req.courseId, user_id=req.userId)
        return {"success": True, "status": STATUS_ALREADY_ENROLLED, "message": MSG_ALREADY_ENROLLED}

    # Course update strictly before the record append
    try:
        await store.add_enrolled_user(course.id, req.userId)
        created = await store.add_enrollment(
            EnrollmentRecord(
                id=enrollment_id(order_id, payment_id),
                user_id=req.userId,
                course_id=course.id,
                course_title=req.courseTitle,
                payment_id=payment_id,
                order_id=order_id,
                amount=course.price,
                currency=course.currency or default_currency,
                enrolled_at=store.server_timestamp(),
            )
        )
    except PersistenceError as exc:
        log.error("enrollment_failed", course_id=course.id, user_id=req.userId, error=exc.details or exc.message)
        raise PersistenceError(MSG_VERIFY_FAILED, details=exc.details or exc.message, field="message") from exc

    if not created:
        log.warning("duplicate_enrollment_record", order_id=order_id, payment_id=payment_id)
        return {"success": True, "status": STATUS_ALREADY_ENROLLED, "message": MSG_ALREADY_ENROLLED}

    log.info("enrolled", course_id=course.id, user_id=req.userId, payment_id=payment_id)
    return {"success": True, "status": STATUS_SUCCESS, "message": MSG_ENROLLED}
