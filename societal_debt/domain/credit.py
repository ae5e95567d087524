"""Credit application - user-level offsets against aggregate societal debt"""

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from societal_debt.domain.exceptions import InvalidCreditAmountError
from societal_debt.domain.models import AggregateResult, CreditApplication, CreditLedgerEntry
from societal_debt.utils.numeric import exact_sum, is_finite


def validate_credit_amount(amount: float) -> None:
    """Reject zero, negative and non-finite credit amounts"""
    if not is_finite(amount) or amount <= 0:
        raise InvalidCreditAmountError(f"Credit amount must be a positive number, got {amount!r}")


def apply_credit(
    current_aggregate: AggregateResult,
    amount: float,
    user_id: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> CreditApplication:
    """
    Subtract a credit from the aggregate's total societal debt.

    The amount is not capped by the available positive impact, so the
    resulting total may go negative (net positive impact). Per-practice and
    per-category figures are left untouched and will no longer sum to the
    new total.

    Raises:
        InvalidCreditAmountError: If amount is not a positive number
    """
    validate_credit_amount(amount)

    new_total = current_aggregate.total_societal_debt - amount
    entry = CreditLedgerEntry(
        applied_amount=amount,
        timestamp=timestamp or datetime.now(timezone.utc),
        resulting_debt=new_total,
        user_id=user_id,
    )
    return CreditApplication(new_total_societal_debt=new_total, ledger_entry=entry)


def outstanding_debt(aggregate: AggregateResult, applied_amounts: List[float]) -> float:
    """Aggregate debt after every credit already applied"""
    return aggregate.total_societal_debt - exact_sum(applied_amounts)


class CreditLedger:
    """
    In-process append-only credit log.

    Appends are serialized behind one lock so that concurrent callers
    holding the same aggregate each see the credits applied before them.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, List[CreditLedgerEntry]] = {}

    def apply(self, user_id: str, aggregate: AggregateResult, amount: float) -> CreditApplication:
        """Apply credit against the user's outstanding debt and record it"""
        validate_credit_amount(amount)

        with self._lock:
            history = self._entries.setdefault(user_id, [])
            outstanding = outstanding_debt(aggregate, [e.applied_amount for e in history])
            application = apply_credit(
                replace(aggregate, total_societal_debt=outstanding),
                amount,
                user_id=user_id,
            )
            history.append(application.ledger_entry)

        return application

    def entries(self, user_id: str) -> List[CreditLedgerEntry]:
        """Ledger entries for a user, oldest first"""
        with self._lock:
            return list(self._entries.get(user_id, []))

    def total_applied(self, user_id: str) -> float:
        return exact_sum(e.applied_amount for e in self.entries(user_id))
