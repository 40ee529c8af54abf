from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload
from datetime import datetime, timedelta
from typing import Optional
import time
import httpx
from restaurant_ordering.domain.models import (
    Order,
    Payment,
    PaymentStatus,
    OrderPaymentStatus,
    TERMINAL_ORDER_STATUSES,
    TERMINAL_PAYMENT_STATUSES,
    as_naive_utc,
    utcnow,
)
from restaurant_ordering.domain.errors import NotFound, InvalidState, AlreadyPaid
from restaurant_ordering.infrastructure.db import atomic
from shared.core import get_logger
from .gateway import PaymentGateway, ManualGateway
from .schemas import PaymentCreate, PaymentStatusUpdate

logger = get_logger(__name__)

class PaymentService:
    def __init__(
        self,
        db: Session,
        gateway: Optional[PaymentGateway] = None,
        expiry_minutes: int = 15,
        qr_base_url: Optional[str] = None,
    ):
        self.db = db
        self.gateway = gateway or ManualGateway()
        self.expiry_minutes = expiry_minutes
        self.qr_base_url = qr_base_url

    def _generate_qr_code_data(self, gateway: str, order_id: int) -> str:
        """Opaque token in format payment_<gateway>_<order>_<ns timestamp>"""
        return f"payment_{gateway}_{order_id}_{time.time_ns()}"

    def _qr_code_url(self, qr_code_data: str) -> Optional[str]:
        if not self.qr_base_url:
            return None
        return str(httpx.URL(self.qr_base_url, params={"data": qr_code_data}))

    def get(self, payment_id: int) -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .options(joinedload(Payment.order))
            .filter(Payment.id == payment_id)
            .first()
        )

    def list_for_order(self, order_id: int):
        if not self.db.get(Order, order_id):
            raise NotFound(f"Order with id {order_id} not found")
        return (
            self.db.query(Payment)
            .filter(Payment.order_id == order_id)
            .order_by(Payment.id)
            .all()
        )

    def create(self, data: PaymentCreate):
        order = self.db.get(Order, data.order_id)
        if not order:
            raise NotFound(f"Order with id {data.order_id} not found")
        if order.status in TERMINAL_ORDER_STATUSES:
            raise InvalidState(f"Cannot create payment for order with status: {order.status.value}")
        if order.payment_status == OrderPaymentStatus.PAID:
            raise AlreadyPaid("Order has already been paid")

        now = utcnow()
        qr_code_data = self._generate_qr_code_data(data.payment_gateway, order.id)
        payment = Payment(
            order_id=order.id,
            payment_gateway=data.payment_gateway,
            qr_code_data=qr_code_data,
            qr_code_url=self._qr_code_url(qr_code_data),
            amount=data.amount,
            status=PaymentStatus.PENDING,
            expires_at=now + timedelta(minutes=self.expiry_minutes),
            created_at=now,
            updated_at=now,
        )
        with atomic(self.db):
            self.db.add(payment)
        self.db.refresh(payment)
        logger.info(
            f"Payment {payment.id} created for order {order.id}",
            extra={'extra_fields': {
                'payment_id': payment.id,
                'order_id': order.id,
                'gateway': payment.payment_gateway,
                'amount': str(payment.amount),
            }}
        )
        return payment

    def _transition(self, payment: Payment, **values) -> bool:
        """Conditionally move a pending payment; False if another writer settled it first."""
        result = self.db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status == PaymentStatus.PENDING)
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _mark_paid(self, payment: Payment, reference: Optional[str], paid_at: datetime) -> bool:
        """Settle a payment and its order as one unit; caller owns the transaction."""
        values = {"status": PaymentStatus.PAID, "paid_at": paid_at}
        if reference is not None:
            values["gateway_reference"] = reference
        if not self._transition(payment, **values):
            return False

        order = payment.order
        order.payment_status = OrderPaymentStatus.PAID
        order.payment_method = payment.payment_gateway
        if reference is not None:
            order.payment_reference = reference
        order.updated_at = utcnow()
        return True

    def update_status(self, payment_id: int, data: PaymentStatusUpdate):
        payment = self.db.get(Payment, payment_id)
        if not payment:
            raise NotFound(f"Payment with id {payment_id} not found")
        if payment.status in TERMINAL_PAYMENT_STATUSES:
            if data.status != payment.status:
                raise InvalidState(
                    f"Payment {payment_id} is already {payment.status.value} and cannot become {data.status.value}"
                )
            # Repeated callback for a settled payment
            return payment

        paid_at = as_naive_utc(data.paid_at)
        with atomic(self.db):
            if data.status == PaymentStatus.PAID:
                moved = self._mark_paid(payment, data.gateway_reference, paid_at or utcnow())
            else:
                values = {"status": data.status}
                if data.gateway_reference is not None:
                    values["gateway_reference"] = data.gateway_reference
                if paid_at is not None:
                    values["paid_at"] = paid_at
                moved = self._transition(payment, **values)
        self.db.refresh(payment)

        if not moved and payment.status != data.status:
            raise InvalidState(
                f"Payment {payment_id} is already {payment.status.value} and cannot become {data.status.value}"
            )
        if moved:
            logger.info(
                f"Payment {payment_id} set to {payment.status.value}",
                extra={'extra_fields': {'payment_id': payment_id, 'status': payment.status.value}}
            )
        return payment

    def check_status(self, payment_id: int) -> Optional[Payment]:
        """Lazily advance a pending payment: expire it, or ask the gateway."""
        payment = self.db.get(Payment, payment_id)
        if not payment:
            return None
        if payment.status in TERMINAL_PAYMENT_STATUSES:
            return payment

        now = utcnow()
        if payment.expires_at is not None and payment.expires_at <= now:
            with atomic(self.db):
                moved = self._transition(payment, status=PaymentStatus.EXPIRED)
            self.db.refresh(payment)
            if moved:
                logger.info(
                    f"Payment {payment_id} expired",
                    extra={'extra_fields': {'payment_id': payment_id, 'expires_at': payment.expires_at}}
                )
            return payment

        result = self.gateway.poll(payment)
        if result is None:
            return payment

        with atomic(self.db):
            if result.status == PaymentStatus.PAID:
                moved = self._mark_paid(payment, result.reference, result.paid_at or now)
            elif result.status == PaymentStatus.FAILED:
                values = {"status": PaymentStatus.FAILED}
                if result.reference is not None:
                    values["gateway_reference"] = result.reference
                moved = self._transition(payment, **values)
            else:
                moved = False
        self.db.refresh(payment)

        if moved:
            logger.info(
                f"Payment {payment_id} reported {payment.status.value} by {self.gateway.name} gateway",
                extra={'extra_fields': {'payment_id': payment_id, 'status': payment.status.value}}
            )
        else:
            logger.info(
                f"Gateway report for payment {payment_id} ignored; payment is {payment.status.value}",
                extra={'extra_fields': {'payment_id': payment_id, 'reported': result.status.value}}
            )
        return payment
