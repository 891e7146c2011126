from app.models.course import Course
from app.models.enrollment import EnrollmentRecord

__all__ = [
    "Course",
    "EnrollmentRecord",
]
