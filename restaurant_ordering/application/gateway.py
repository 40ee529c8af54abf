"""Payment gateway oracles consulted by the payment status check.

An oracle only reports what the gateway knows about a pending payment;
the state transitions themselves stay in PaymentService.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
import httpx
from restaurant_ordering.domain.models import Payment, PaymentStatus, as_naive_utc, utcnow
from shared.core import get_logger

logger = get_logger(__name__)

@dataclass
class GatewayResult:
    status: PaymentStatus
    reference: Optional[str] = None
    paid_at: Optional[datetime] = None

class PaymentGateway:
    name = "base"

    def poll(self, payment: Payment) -> Optional[GatewayResult]:
        """Return the gateway's verdict, or None while it has nothing to report."""
        raise NotImplementedError

class ManualGateway(PaymentGateway):
    """Never reports; payments settle through status update callbacks only."""
    name = "manual"

    def poll(self, payment: Payment) -> Optional[GatewayResult]:
        return None

class SimulatedGateway(PaymentGateway):
    """Approves a payment once it has been pending for ``approval_delay``."""
    name = "simulated"

    def __init__(self, approval_delay: timedelta, clock: Callable[[], datetime] = utcnow):
        self.approval_delay = approval_delay
        self.clock = clock

    def poll(self, payment: Payment) -> Optional[GatewayResult]:
        if self.clock() - payment.created_at < self.approval_delay:
            return None
        return GatewayResult(
            status=PaymentStatus.PAID,
            reference=f"sim_{payment.qr_code_data}",
        )

class HttpPaymentGateway(PaymentGateway):
    """Queries a gateway HTTP API for the payment behind a QR token."""
    name = "http"

    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def poll(self, payment: Payment) -> Optional[GatewayResult]:
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = client.get(f"/payments/{payment.qr_code_data}")
        except httpx.HTTPError as e:
            # An unreachable gateway is "no news"; the payment stays pending
            logger.warning(
                f"Gateway poll failed for payment {payment.id}: {e}",
                extra={'extra_fields': {'payment_id': payment.id, 'gateway': self.base_url}}
            )
            return None

        if response.status_code != 200:
            return None

        try:
            return self._parse(response.json())
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(
                f"Unreadable gateway response for payment {payment.id}: {e}",
                extra={'extra_fields': {'payment_id': payment.id, 'gateway': self.base_url}}
            )
            return None

    @staticmethod
    def _parse(body: dict) -> Optional[GatewayResult]:
        status = body.get("status")
        if status not in (PaymentStatus.PAID.value, PaymentStatus.FAILED.value):
            return None

        paid_at = body.get("paid_at")
        return GatewayResult(
            status=PaymentStatus(status),
            reference=body.get("reference"),
            paid_at=as_naive_utc(datetime.fromisoformat(paid_at)) if paid_at else None,
        )

def build_gateway(settings) -> PaymentGateway:
    mode = settings.PAYMENT_GATEWAY.lower()
    if mode == "manual":
        return ManualGateway()
    if mode == "http":
        return HttpPaymentGateway(settings.PAYMENT_GATEWAY_URL, timeout=settings.PAYMENT_GATEWAY_TIMEOUT)
    if mode == "simulated":
        return SimulatedGateway(timedelta(seconds=settings.PAYMENT_SIMULATED_APPROVAL_SECONDS))
    raise ValueError(f"Unknown PAYMENT_GATEWAY: {settings.PAYMENT_GATEWAY}")
