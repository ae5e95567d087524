"""Transaction scorer - core business logic turning practices into societal debt"""

from typing import Dict, Iterable, List, Sequence, Tuple

from societal_debt.domain.ledger import practice_amount
from societal_debt.domain.models import PracticeAssignment, ScoredTransaction, Transaction
from societal_debt.utils.numeric import exact_sum


def score_transaction(
    transaction: Transaction,
    assignments: Sequence[PracticeAssignment],
) -> ScoredTransaction:
    """
    Apply the practice ledger to every practice on one transaction.

    Requirements:
    - Each practice's signed amount is stored under its label
    - A label repeated on the same transaction keeps the later amount
    - societal_debt is the exact sum of practice_debts
    - No practices means no debt; the raw amount is never used as a fallback
    """
    practice_debts: Dict[str, float] = {}
    for assignment in assignments:
        practice_debts[assignment.practice_label] = practice_amount(
            transaction.amount,
            assignment.weight_percent,
            assignment.polarity,
        )

    societal_debt = exact_sum(practice_debts.values()) if practice_debts else 0.0

    return ScoredTransaction(
        transaction=transaction,
        assignments=list(assignments),
        practice_debts=practice_debts,
        societal_debt=societal_debt,
    )


def score_transactions(
    classified: Iterable[Tuple[Transaction, Sequence[PracticeAssignment]]],
) -> List[ScoredTransaction]:
    """Score a batch of (transaction, assignments) pairs, preserving order"""
    return [score_transaction(transaction, assignments) for transaction, assignments in classified]
