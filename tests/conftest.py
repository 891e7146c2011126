import os
from typing import Any, AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError as PydanticValidationError

# No real Razorpay or MongoDB in tests
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test-razorpay-secret"
os.environ["MONGODB_URI"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from app.core.exceptions import PersistenceError  # noqa: E402
from app.core.security import payment_signature  # noqa: E402
from app.deps import get_document_store, get_payment_gateway  # noqa: E402
from app.gateways.base import PaymentGateway  # noqa: E402
from app.models.course import Course  # noqa: E402
from app.models.enrollment import EnrollmentRecord  # noqa: E402
from app.storage.base import DocumentStore  # noqa: E402

TEST_SECRET = "test-razorpay-secret"


class FakeGateway(PaymentGateway):
    def __init__(self, order_id: str = "order_abc", error: Exception | None = None) -> None:
        self.key_secret = TEST_SECRET
        self.order_id = order_id
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def create_order(self, amount, currency, receipt, notes):
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt, "notes": notes})
        if self.error:
            raise self.error
        return {"id": self.order_id, "amount": amount, "currency": currency, "receipt": receipt, "notes": notes}


class InMemoryStore(DocumentStore):
    """Dict-backed store; ``fail_on`` names operations that raise PersistenceError."""

    def __init__(self) -> None:
        self.courses: dict[str, dict[str, Any]] = {}
        self.enrollments: dict[str, EnrollmentRecord] = {}
        self.fail_on: set[str] = set()
        self.operations: list[str] = []

    def add_course(self, course_id: str, price: int = 49900, enrolled: list[str] | None = None, **extra) -> None:
        self.courses[course_id] = {"_id": course_id, "title": f"Course {course_id}", "price": price,
                                   "enrolledUsers": list(enrolled or []), **extra}

    def _check(self, op: str) -> None:
        self.operations.append(op)
        if op in self.fail_on:
            raise PersistenceError(f"{op} failed", details="store unavailable")

    async def get_course(self, course_id):
        self._check("get_course")
        doc = self.courses.get(course_id)
        if doc is None:
            return None
        try:
            return Course.model_validate(doc)
        except PydanticValidationError as exc:
            raise PersistenceError("Malformed course document", details=str(exc)) from exc

    async def add_enrolled_user(self, course_id, user_id):
        self._check("add_enrolled_user")
        users = self.courses[course_id].setdefault("enrolledUsers", [])
        if user_id not in users:
            users.append(user_id)

    async def add_enrollment(self, record):
        self._check("add_enrollment")
        if record.id in self.enrollments:
            return False
        self.enrollments[record.id] = record
        return True


def sign(order_id: str, payment_id: str, secret: str = TEST_SECRET) -> str:
    return payment_signature(secret, order_id, payment_id)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.add_course("c1")
    return s


@pytest.fixture
def app(gateway: FakeGateway, store: InMemoryStore):
    from app.main import app as fastapi_app
    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_document_store] = lambda: store
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
