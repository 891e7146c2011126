from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ENROLLMENT_TYPE_PAID = "Paid"
STATUS_COMPLETED = "completed"


def enrollment_id(order_id: str, payment_id: str) -> str:
    """Deterministic key so one payment can never produce two records."""
    return f"{order_id}:{payment_id}"


class EnrollmentRecord(BaseModel):
    """Append-only audit record; serialized with the camelCase keys of the ``enrollments`` collection."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    user_id: str
    course_id: str
    course_title: str
    payment_id: str
    order_id: str
    amount: int | float | None = None  # course price at enrollment time
    currency: str
    enrollment_type: str = ENROLLMENT_TYPE_PAID
    enrolled_at: datetime
    status: str = STATUS_COMPLETED
