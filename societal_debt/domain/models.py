"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

UNCATEGORIZED = "Uncategorized"


class Polarity(str, Enum):
    """Whether a practice adds to (unethical) or offsets (ethical) societal debt"""

    UNETHICAL = "unethical"
    ETHICAL = "ethical"


@dataclass(frozen=True)
class Transaction:
    """Purchase from the transaction feed, never mutated after fetch"""

    transaction_id: str
    date: date
    merchant_name: str
    amount: float  # Purchase total in currency units


@dataclass(frozen=True)
class Remediation:
    """Charity to donate to (unethical) or an affirming note (ethical)"""

    name: str
    url: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class PracticeAssignment:
    """Single practice the classifier attached to a transaction"""

    practice_label: str
    polarity: Polarity
    weight_percent: Optional[float] = None  # None: classifier gave no weight
    category: str = UNCATEGORIZED
    description: str = ""
    remediation: Optional[Remediation] = None
    search_term: Optional[str] = None


@dataclass
class ScoredTransaction:
    """Transaction plus its practices and the debt derived from them"""

    transaction: Transaction
    assignments: List[PracticeAssignment]
    practice_debts: Dict[str, float]
    societal_debt: float

    def effective_assignments(self) -> Dict[str, PracticeAssignment]:
        """Assignment behind each practice_debts entry (later duplicates win)"""
        return {a.practice_label: a for a in self.assignments}


@dataclass
class PracticeTotal:
    """Signed amount for one practice summed across transactions"""

    practice_label: str
    amount: float
    polarity: Polarity
    category: str = UNCATEGORIZED
    remediation: Optional[Remediation] = None


@dataclass
class CategoryGroup:
    """Practices sharing a category with their signed total"""

    category: str
    total_impact: float
    practices: List[PracticeTotal] = field(default_factory=list)


@dataclass(frozen=True)
class AggregateResult:
    """Roll-up of a set of scored transactions"""

    total_societal_debt: float
    total_spent: float
    debt_percentage: float
    per_practice: Dict[str, PracticeTotal]
    per_category: List[CategoryGroup]


@dataclass(frozen=True)
class CreditLedgerEntry:
    """Append-only record of a user-applied credit"""

    applied_amount: float
    timestamp: datetime
    resulting_debt: float
    user_id: Optional[str] = None


@dataclass(frozen=True)
class CreditApplication:
    """Outcome of applying credit against an aggregate"""

    new_total_societal_debt: float
    ledger_entry: CreditLedgerEntry


@dataclass
class PracticeImpact:
    """Practice contribution within a single vendor"""

    practice_label: str
    impact: float
    polarity: Polarity


@dataclass
class VendorSummary:
    """Spend and debt grouped by merchant"""

    merchant_name: str
    total_spent: float
    societal_debt: float
    debt_percentage: float
    transaction_count: int
    practices: List[PracticeImpact] = field(default_factory=list)


@dataclass
class PurchaseSplit:
    """Spend on transactions carrying ethical vs unethical practices"""

    positive_amount: float
    negative_amount: float
