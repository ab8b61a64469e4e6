# core/pos_service.py
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.config import DEFAULT_TAX_PERCENTAGE
from core.errors import ValidationError
from core.order_service import complete_order, get_order
from core.receipt_service import print_text, render_receipt
from models.order import OrderStatus, PaymentDetails, PaymentMethod

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _percentage(value) -> Decimal:
    try:
        pct = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Tax percentage must be a number", field="tax_percentage")
    if not pct.is_finite() or pct < 0 or pct > 100:
        raise ValidationError("Tax percentage must be between 0 and 100", field="tax_percentage")
    return pct


@dataclass
class PaymentSummary:
    subtotal: float
    tax_percentage: float
    tax_amount: float
    total: float


def calculate_payment(order, tax_percentage=DEFAULT_TAX_PERCENTAGE) -> PaymentSummary:
    """Subtotal from the order lines plus tax, each rounded half-up to cents."""
    pct = _percentage(tax_percentage)
    subtotal = _money(sum(Decimal(str(line.price)) * line.quantity for line in order.order_items))
    tax = _money(subtotal * pct / 100)
    return PaymentSummary(
        subtotal=float(subtotal),
        tax_percentage=float(pct),
        tax_amount=float(tax),
        total=float(subtotal + tax),
    )


def build_payment_details(order, method, tax_percentage=DEFAULT_TAX_PERCENTAGE, notes: str = None) -> PaymentDetails:
    try:
        method = PaymentMethod(method)
    except ValueError:
        raise ValidationError("Payment method must be cash or card", field="payment_method")
    summary = calculate_payment(order, tax_percentage)
    return PaymentDetails(
        payment_method=method,
        amount_paid=summary.total,
        tax_percentage=summary.tax_percentage,
        tax_amount=summary.tax_amount,
        subtotal=summary.subtotal,
        notes=(notes or "").strip() or None,
    )


def change_due(total, tendered) -> float:
    """Change to hand back for a cash payment."""
    try:
        tendered = _money(tendered)
    except InvalidOperation:
        raise ValidationError("Amount received must be a number", field="tendered")
    if not tendered.is_finite():
        raise ValidationError("Amount received must be a number", field="tendered")
    total = _money(total)
    if tendered < total:
        raise ValidationError("Amount received is less than the total", field="tendered")
    return float(tendered - total)


class PosCheckout:
    """
    Point-of-sale screen state: settles a delivered order and then shows its
    receipt until the cashier starts a new transaction.
    """

    def __init__(self, api, channel=None, working_set=None, printer=print_text):
        self.api = api
        self.channel = channel
        self.working_set = working_set
        self.printer = printer
        self.receipt_order = None

    @property
    def receipt_mode(self) -> bool:
        return self.receipt_order is not None

    def _order(self, order_id):
        order = self.working_set.get(order_id) if self.working_set is not None else None
        return order if order is not None else get_order(self.api, order_id)

    def complete(self, order_id, method, tax_percentage=DEFAULT_TAX_PERCENTAGE, notes: str = None):
        """
        Submit payment. The order returned by the server becomes the receipt
        source; API errors (e.g. the order is already completed) propagate
        and leave the screen as it was.
        """
        order = self._order(order_id)
        details = build_payment_details(order, method, tax_percentage, notes)
        if self.channel is not None:
            self.channel.broadcast_payment_processing(order)
        completed = complete_order(self.api, order_id, details)

        # Other screens must see the order leave the payable set even if the
        # server echoes an older status
        settled = completed.with_status(OrderStatus.COMPLETED)
        if self.channel is not None:
            self.channel.broadcast_status_change(settled)
        if self.working_set is not None:
            self.working_set.apply(settled)
        self.receipt_order = completed
        self.print_receipt()
        return completed

    def print_receipt(self) -> bool:
        if self.receipt_order is None:
            return False
        return self.reprint(self.receipt_order)

    def reprint(self, order) -> bool:
        """Print the receipt of any settled order, e.g. from the history tab."""
        return self._print(render_receipt(order), f"receipt-{order.id}")

    def _print(self, text, title) -> bool:
        try:
            printed = self.printer(text, title)
        except Exception:
            logger.exception("Printer failed for %s", title)
            return False
        if not printed:
            logger.warning("%s was not printed", title)
        return bool(printed)

    def new_transaction(self):
        self.receipt_order = None
