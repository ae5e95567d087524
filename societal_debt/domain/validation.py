"""Data quality checks for classifier output.

The scoring engine tolerates every issue reported here; callers log them.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from societal_debt.domain.models import UNCATEGORIZED, PracticeAssignment, Polarity, Transaction
from societal_debt.utils.numeric import is_finite


@dataclass(frozen=True)
class DataQualityIssue:
    """Something odd in a transaction's classification"""

    transaction_id: str
    code: str
    detail: str
    practice_label: str = ""


MISSING_WEIGHT = "missing_weight"
WEIGHT_OUT_OF_RANGE = "weight_out_of_range"
MISSING_CATEGORY = "missing_category"
DUPLICATE_LABEL = "duplicate_label"
CONTRADICTORY_POLARITY = "contradictory_polarity"
NEGATIVE_AMOUNT = "negative_amount"


def find_data_quality_issues(
    transaction: Transaction,
    assignments: Sequence[PracticeAssignment],
) -> List[DataQualityIssue]:
    """List every tolerated defect in one transaction's classification"""
    tid = transaction.transaction_id
    issues: List[DataQualityIssue] = []

    if not is_finite(transaction.amount) or transaction.amount < 0:
        issues.append(DataQualityIssue(tid, NEGATIVE_AMOUNT, f"amount {transaction.amount!r} treated as 0"))

    seen: Dict[str, Polarity] = {}
    for assignment in assignments:
        label = assignment.practice_label
        weight = assignment.weight_percent

        if weight is None or not is_finite(weight):
            issues.append(DataQualityIssue(tid, MISSING_WEIGHT, "weight defaulted to 100", label))
        elif not 0 <= weight <= 100:
            issues.append(DataQualityIssue(tid, WEIGHT_OUT_OF_RANGE, f"weight {weight} clamped to [0, 100]", label))

        if not assignment.category or assignment.category == UNCATEGORIZED:
            issues.append(DataQualityIssue(tid, MISSING_CATEGORY, f"category defaulted to {UNCATEGORIZED}", label))

        if label in seen:
            if seen[label] != assignment.polarity:
                issues.append(
                    DataQualityIssue(tid, CONTRADICTORY_POLARITY, "label has both polarities, later one kept", label)
                )
            else:
                issues.append(DataQualityIssue(tid, DUPLICATE_LABEL, "label repeated, later weight kept", label))
        seen[label] = assignment.polarity

    return issues
