"""Loyalty points calculator.

Pure integer arithmetic over cents:

- one redeemed point is worth ``redemption_rate_cents`` (50 cents, 0.5 DH)
- a paid order earns ``earn_rate_percent`` of its final amount in points,
  floored (30 percent, so 50 DH paid earns 15 points)
"""

from typing import Optional

from .models import Customer

REDEMPTION_RATE_CENTS = 50
EARN_RATE_PERCENT = 30


def max_redeemable_points(
    customer: Optional[Customer],
    subtotal_cents: int,
    redemption_rate_cents: int = REDEMPTION_RATE_CENTS,
) -> int:
    """Largest redemption allowed: the balance, capped so the discount fits the subtotal."""
    if customer is None or subtotal_cents <= 0:
        return 0
    max_for_order = subtotal_cents // redemption_rate_cents
    return max(0, min(customer.loyalty_points, max_for_order))


def discount_for(points: int, redemption_rate_cents: int = REDEMPTION_RATE_CENTS) -> int:
    """Discount in cents granted for redeeming ``points``."""
    return points * redemption_rate_cents


def points_earned(final_amount_cents: int, earn_rate_percent: int = EARN_RATE_PERCENT) -> int:
    """Points earned on a paid amount, floored to whole points."""
    if final_amount_cents <= 0:
        return 0
    # cents -> currency is /100, percent -> fraction is /100
    return (final_amount_cents * earn_rate_percent) // 10_000


def clamp_redemption(requested: int, maximum: int) -> int:
    """Clamp a requested redemption into ``[0, maximum]``."""
    return max(0, min(requested, maximum))
