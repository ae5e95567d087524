"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from societal_debt.domain.models import UNCATEGORIZED, PracticeAssignment, Polarity, Remediation, Transaction


class RemediationSchema(BaseModel):
    """Charity reference or affirming note attached to a practice"""

    name: str
    url: Optional[str] = None
    note: Optional[str] = None


class TransactionSchema(BaseModel):
    """Purchase as delivered by the transaction feed"""

    transaction_id: str = Field(..., min_length=1)
    date: date
    merchant_name: str
    amount: float = Field(..., description="Purchase total; negative values score as 0")

    def to_domain(self) -> Transaction:
        return Transaction(
            transaction_id=self.transaction_id,
            date=self.date,
            merchant_name=self.merchant_name,
            amount=self.amount,
        )


class PracticeAssignmentSchema(BaseModel):
    """Practice assigned to a transaction by the classifier"""

    practice_label: str
    polarity: Polarity
    weight_percent: Optional[float] = Field(None, description="Percent of the amount; omitted means 100")
    category: Optional[str] = None
    description: str = ""
    remediation: Optional[RemediationSchema] = None
    search_term: Optional[str] = None

    def to_domain(self) -> PracticeAssignment:
        return PracticeAssignment(
            practice_label=self.practice_label,
            polarity=self.polarity,
            weight_percent=self.weight_percent,
            category=self.category or UNCATEGORIZED,
            description=self.description,
            remediation=Remediation(**self.remediation.model_dump()) if self.remediation else None,
            search_term=self.search_term,
        )


class ClassifiedTransactionSchema(BaseModel):
    """Transaction with its classifier output"""

    transaction: TransactionSchema
    assignments: List[PracticeAssignmentSchema] = Field(default_factory=list)


class ScoreRequest(BaseModel):
    """Request body for POST /v1/impact/score"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    transactions: List[ClassifiedTransactionSchema]


class AnalyzeRequest(BaseModel):
    """Request body for POST /v1/impact/analyze"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class ScoredTransactionSchema(BaseModel):
    """Transaction with its per-practice debts"""

    transaction: TransactionSchema
    assignments: List[PracticeAssignmentSchema]
    practice_debts: Dict[str, float]
    societal_debt: float


class PracticeTotalSchema(BaseModel):
    practice_label: str
    amount: float
    polarity: Polarity
    category: str
    remediation: Optional[RemediationSchema] = None


class CategoryGroupSchema(BaseModel):
    category: str
    total_impact: float
    practices: List[PracticeTotalSchema]


class AggregateSchema(BaseModel):
    """Totals and grouped views over a set of scored transactions"""

    total_societal_debt: float
    total_spent: float
    debt_percentage: float
    per_practice: Dict[str, PracticeTotalSchema]
    per_category: List[CategoryGroupSchema]


class PracticeImpactSchema(BaseModel):
    practice_label: str
    impact: float
    polarity: Polarity


class VendorSchema(BaseModel):
    merchant_name: str
    total_spent: float
    societal_debt: float
    debt_percentage: float
    transaction_count: int
    practices: List[PracticeImpactSchema]


class CategoryAmountSchema(BaseModel):
    category: str
    amount: float


class InsightsSchema(BaseModel):
    """Dashboard figures derived from the scored transactions"""

    available_credit: float
    impact_score: float
    positive_purchases: float
    negative_purchases: float
    top_negative_categories: List[CategoryAmountSchema]
    vendors: List[VendorSchema]


class ImpactResponse(BaseModel):
    """Response for the /v1/impact endpoints"""

    user_id: str
    snapshot_id: str
    aggregate: AggregateSchema
    insights: InsightsSchema
    transactions: List[ScoredTransactionSchema]
    created_at: str


class CreditRequest(BaseModel):
    """Request body for POST /v1/credit"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    amount: float = Field(..., gt=0, description="Credit to apply against societal debt")


class CreditEntrySchema(BaseModel):
    """Single applied credit"""

    applied_amount: float
    resulting_debt: float
    timestamp: datetime


class CreditResponse(BaseModel):
    """Response for POST /v1/credit"""

    user_id: str
    new_total_societal_debt: float
    entry: CreditEntrySchema


class CreditHistoryResponse(BaseModel):
    """Response for GET /v1/credit/history"""

    user_id: str
    entries: List[CreditEntrySchema]
