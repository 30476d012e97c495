from __future__ import annotations

from siteledger.models import PaymentStatus
from siteledger.services.ledger.helpers import clamp_non_negative


def classify(paid: float | None, due: float | None) -> PaymentStatus:
    """
    Settlement status of one day's wage.

    Negative or unreadable inputs are clamped to 0. Nothing owed counts as
    settled, whether or not anything was paid.
    """
    paid_value = clamp_non_negative(paid)
    due_value = clamp_non_negative(due)
    if due_value == 0.0:
        return PaymentStatus.FULLY_PAID
    if paid_value >= due_value:
        return PaymentStatus.FULLY_PAID
    if paid_value > 0.0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID


__all__ = ["classify"]
