"""Payment gateway port.

Adapters capture funds for a payment that is already in Processing. A
declined charge is a normal outcome (``CaptureResult.success`` False); an
unreachable gateway raises ``InfrastructureError`` so the caller can retry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CaptureResult:
    success: bool
    transaction_id: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def capture(
        self,
        payment_id: str,
        amount: float,
        currency: str,
        method: str,
        last4: str | None = None,
    ) -> CaptureResult:
        ...
