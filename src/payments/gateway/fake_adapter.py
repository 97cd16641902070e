"""In-process gateway for development and tests.

Approves every capture by default. Tests switch it to decline charges, or
to behave as if the gateway were down.
"""

from uuid import uuid4

from shared.errors import InfrastructureError

from payments.gateway.port import CaptureResult, PaymentGateway


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.available: bool = True
        self.failure_reason: str = "Card declined"
        self.captures: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Card declined",
        available: bool = True,
    ) -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.available = available

    def capture(
        self,
        payment_id: str,
        amount: float,
        currency: str,
        method: str,
        last4: str | None = None,
    ) -> CaptureResult:
        if not self.available:
            raise InfrastructureError("Payment gateway is unavailable")

        self.captures.append(
            {
                "payment_id": payment_id,
                "amount": amount,
                "currency": currency,
                "method": method,
                "last4": last4,
            }
        )
        if self.should_succeed:
            return CaptureResult(success=True, transaction_id=f"TXN-{uuid4().hex[:12].upper()}")
        return CaptureResult(success=False, failure_reason=self.failure_reason)
