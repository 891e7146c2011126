from datetime import datetime

from beanie import Document
from pydantic import ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import PersistenceError
from app.models.course import Course
from app.models.enrollment import ENROLLMENT_TYPE_PAID, STATUS_COMPLETED, EnrollmentRecord
from app.storage.base import DocumentStore


class CourseDocument(Document):
    """Shared ``courses`` collection; only ``enrolledUsers`` is written here."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str | None = None
    price: int | float | None = None
    currency: str | None = None
    enrolled_users: list[str] = Field(default_factory=list, alias="enrolledUsers")

    class Settings:
        name = "courses"


class EnrollmentDocument(Document):
    id: str  # order_id:payment_id
    user_id: str = Field(alias="userId")
    course_id: str = Field(alias="courseId")
    course_title: str = Field(alias="courseTitle")
    payment_id: str = Field(alias="paymentId")
    order_id: str = Field(alias="orderId")
    amount: int | float | None = None
    currency: str
    enrollment_type: str = Field(default=ENROLLMENT_TYPE_PAID, alias="enrollmentType")
    enrolled_at: datetime = Field(alias="enrolledAt")
    status: str = STATUS_COMPLETED

    class Settings:
        name = "enrollments"
        indexes = [
            [("userId", 1), ("courseId", 1)],
            [("paymentId", 1)],
        ]


DOCUMENT_MODELS = [CourseDocument, EnrollmentDocument]


class MongoDocumentStore(DocumentStore):
    """Beanie-backed store; requires ``init_beanie`` with DOCUMENT_MODELS first."""

    async def get_course(self, course_id: str) -> Course | None:
        try:
            doc = await CourseDocument.get(course_id)
        except PydanticValidationError as exc:
            raise PersistenceError("Malformed course document", details=str(exc)) from exc
        except PyMongoError as exc:
            raise PersistenceError("Failed to load course", details=str(exc)) from exc
        if doc is None:
            return None
        return Course(
            id=doc.id,
            title=doc.title,
            price=doc.price,
            currency=doc.currency,
            enrolled_users=doc.enrolled_users,
        )

    async def add_enrolled_user(self, course_id: str, user_id: str) -> None:
        try:
            result = await CourseDocument.find_one(CourseDocument.id == course_id).update(
                {"$addToSet": {"enrolledUsers": user_id}}
            )
        except PyMongoError as exc:
            raise PersistenceError("Failed to update course", details=str(exc)) from exc
        if result.matched_count == 0:
            raise PersistenceError("Failed to update course", details=f"course {course_id} disappeared")

    async def add_enrollment(self, record: EnrollmentRecord) -> bool:
        try:
            await EnrollmentDocument(**record.model_dump()).insert()
        except DuplicateKeyError:
            return False
        except PyMongoError as exc:
            raise PersistenceError("Failed to record enrollment", details=str(exc)) from exc
        return True
