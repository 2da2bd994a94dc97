"""Receipt formatting."""

from .helpers import format_money
from .loyalty import REDEMPTION_RATE_CENTS, discount_for
from .models import Order

WIDTH = 40


def _row(label: str, value: str) -> str:
    return f"{label}{value.rjust(WIDTH - len(label))}"


def format_receipt(order: Order, redemption_rate_cents: int = REDEMPTION_RATE_CENTS) -> str:
    """Format a human-readable receipt."""
    lines = []

    lines.append("=" * WIDTH)
    lines.append("RECEIPT".center(WIDTH).rstrip())
    lines.append("=" * WIDTH)
    lines.append(f"Order: {order.id}")
    lines.append(f"Date: {order.date}")
    lines.append(f"Customer: {order.customer_id}" if order.customer_id else "Customer: Guest")
    lines.append("-" * WIDTH)

    for item in order.items:
        lines.append(_row(f"{item.quantity} x {item.name}", format_money(item.line_total_cents)))

    lines.append("-" * WIDTH)
    lines.append(_row("Subtotal", format_money(order.subtotal_cents)))

    if order.points_redeemed > 0:
        discount = discount_for(order.points_redeemed, redemption_rate_cents)
        lines.append(_row("Points Discount", f"-{format_money(discount)}"))

    lines.append(_row("Total Paid", format_money(order.final_amount_cents)))

    if order.points_earned > 0:
        lines.append(_row("Points Earned", f"+{order.points_earned}"))

    lines.append("=" * WIDTH)
    lines.append("Thank you for your visit!".center(WIDTH).rstrip())
    lines.append("=" * WIDTH)

    return "\n".join(lines)
