"""Practice ledger - per-practice signed debt amounts"""

from typing import Optional

from societal_debt.domain.models import Polarity
from societal_debt.utils.numeric import clamp, is_finite

FULL_ATTRIBUTION = 100.0


def clamp_weight(weight_percent: float) -> float:
    """Clamp a classifier weight into [0, 100] instead of rejecting it"""
    return clamp(weight_percent, 0.0, FULL_ATTRIBUTION)


def resolve_weight(weight_percent: Optional[float]) -> float:
    """
    Effective weight for an assignment.

    An unweighted classification means full responsibility, so a missing
    (or non-numeric) weight resolves to 100.
    """
    if not is_finite(weight_percent):
        return FULL_ATTRIBUTION
    return clamp_weight(weight_percent)


def practice_amount(transaction_amount: float, weight_percent: Optional[float], polarity: Polarity) -> float:
    """
    Signed debt attributed to one practice on one transaction.

    Returns transaction_amount * weight / 100, positive for unethical
    practices and negated for ethical ones. Negative amounts are treated
    as 0 and weights are clamped, so noisy classifier output never raises.

    Example:
        practice_amount(80, 40, Polarity.UNETHICAL) -> 32.0
        practice_amount(80, 10, Polarity.ETHICAL)   -> -8.0
    """
    amount = transaction_amount if is_finite(transaction_amount) and transaction_amount > 0 else 0.0
    portion = amount * (resolve_weight(weight_percent) / 100)

    if polarity == Polarity.ETHICAL:
        return -portion
    return portion
