from abc import ABC, abstractmethod
from typing import Any


class PaymentGateway(ABC):
    key_secret: str

    @abstractmethod
    async def create_order(self, amount: int, currency: str, receipt: str, notes: dict[str, str]) -> dict[str, Any]:
        """Create a provider order; return the provider's order object (must carry ``id``)."""
        ...
