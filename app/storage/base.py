from abc import ABC, abstractmethod
from datetime import datetime, timezone

from app.models.course import Course
from app.models.enrollment import EnrollmentRecord


class DocumentStore(ABC):
    @abstractmethod
    async def get_course(self, course_id: str) -> Course | None:
        """Return the course document or None if it does not exist."""
        ...

    @abstractmethod
    async def add_enrolled_user(self, course_id: str, user_id: str) -> None:
        """Set-union ``user_id`` into the course's enrolled users."""
        ...

    @abstractmethod
    async def add_enrollment(self, record: EnrollmentRecord) -> bool:
        """Append an enrollment record; False if one with the same id already exists."""
        ...

    def server_timestamp(self) -> datetime:
        return datetime.now(timezone.utc)
