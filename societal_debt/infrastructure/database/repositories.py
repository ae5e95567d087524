"""Data access layer for impact snapshots and the credit ledger"""

from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
import uuid

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from societal_debt.config import settings
from societal_debt.domain.credit import apply_credit, validate_credit_amount
from societal_debt.domain.exceptions import CreditConflictError
from societal_debt.domain.models import (
    AggregateResult,
    CategoryGroup,
    CreditApplication,
    CreditLedgerEntry,
    Polarity,
    PracticeAssignment,
    PracticeTotal,
    Remediation,
    ScoredTransaction,
    Transaction,
)
from societal_debt.infrastructure.database.models import CreditAccount, CreditLedgerEntryRecord, ImpactSnapshot
from societal_debt.utils.serialization import to_primitive


def _practice_total(data: Dict[str, Any]) -> PracticeTotal:
    return PracticeTotal(
        practice_label=data["practice_label"],
        amount=data["amount"],
        polarity=Polarity(data["polarity"]),
        category=data["category"],
        remediation=_remediation(data.get("remediation")),
    )


def _remediation(data: Optional[Dict[str, Any]]) -> Optional[Remediation]:
    return Remediation(**data) if data else None


def _scored_transaction(data: Dict[str, Any]) -> ScoredTransaction:
    txn = data["transaction"]
    return ScoredTransaction(
        transaction=Transaction(
            transaction_id=txn["transaction_id"],
            date=date.fromisoformat(txn["date"]),
            merchant_name=txn["merchant_name"],
            amount=txn["amount"],
        ),
        assignments=[
            PracticeAssignment(
                practice_label=a["practice_label"],
                polarity=Polarity(a["polarity"]),
                weight_percent=a["weight_percent"],
                category=a["category"],
                description=a["description"],
                remediation=_remediation(a["remediation"]),
                search_term=a["search_term"],
            )
            for a in data["assignments"]
        ],
        practice_debts=dict(data["practice_debts"]),
        societal_debt=data["societal_debt"],
    )


class SnapshotRepository:
    """Repository for persisted aggregate results"""

    def __init__(self, db: Session):
        self.db = db

    def create_snapshot(
        self,
        user_id: str,
        aggregate: AggregateResult,
        scored_transactions: Sequence[ScoredTransaction],
    ) -> ImpactSnapshot:
        """Persist an aggregate together with its drill-down transactions"""
        snapshot = ImpactSnapshot(
            user_id=user_id,
            total_societal_debt=aggregate.total_societal_debt,
            total_spent=aggregate.total_spent,
            debt_percentage=aggregate.debt_percentage,
            transaction_count=len(scored_transactions),
            per_practice=to_primitive(aggregate.per_practice),
            per_category=to_primitive(aggregate.per_category),
            scored_transactions=to_primitive(list(scored_transactions)),
        )
        self.db.add(snapshot)
        self.db.flush()  # Get ID without committing
        return snapshot

    def get_latest(self, user_id: str) -> Optional[ImpactSnapshot]:
        """Most recent snapshot for a user"""
        return (
            self.db.query(ImpactSnapshot)
            .filter(ImpactSnapshot.user_id == user_id)
            .order_by(ImpactSnapshot.created_at.desc())
            .first()
        )

    @staticmethod
    def to_aggregate(snapshot: ImpactSnapshot) -> AggregateResult:
        """Rebuild the domain aggregate stored in a snapshot"""
        return AggregateResult(
            total_societal_debt=snapshot.total_societal_debt,
            total_spent=snapshot.total_spent,
            debt_percentage=snapshot.debt_percentage,
            per_practice={label: _practice_total(p) for label, p in snapshot.per_practice.items()},
            per_category=[
                CategoryGroup(
                    category=c["category"],
                    total_impact=c["total_impact"],
                    practices=[_practice_total(p) for p in c["practices"]],
                )
                for c in snapshot.per_category
            ],
        )

    @staticmethod
    def to_scored_transactions(snapshot: ImpactSnapshot) -> List[ScoredTransaction]:
        """Rebuild the drill-down transactions stored in a snapshot"""
        return [_scored_transaction(s) for s in snapshot.scored_transactions]


class CreditLedgerRepository:
    """Repository for the append-only credit ledger"""

    def __init__(self, db: Session, max_retries: int | None = None):
        self.db = db
        self.max_retries = settings.credit_max_cas_retries if max_retries is None else max_retries

    def _get_account(self, user_id: str) -> CreditAccount:
        account = self.db.get(CreditAccount, user_id)
        if account is not None:
            self.db.refresh(account)
            return account

        # Another writer may create the row between the read and the insert
        try:
            with self.db.begin_nested():
                account = CreditAccount(user_id=user_id, applied_total=0.0, version=0)
                self.db.add(account)
                self.db.flush()
        except IntegrityError:
            account = self.db.get(CreditAccount, user_id, populate_existing=True)
            if account is None:
                raise
        return account

    def append_credit(
        self,
        user_id: str,
        aggregate: AggregateResult,
        amount: float,
        snapshot_id: uuid.UUID | None = None,
    ) -> CreditApplication:
        """
        Apply credit against the user's outstanding debt and append a ledger row.

        Outstanding debt is the aggregate total minus all credit the user has
        already applied. The running total is advanced with a compare-and-swap
        on the account version, so concurrent appends never lose an update.

        Raises:
            InvalidCreditAmountError: If amount is not a positive number
            CreditConflictError: If the swap keeps losing to other writers
        """
        validate_credit_amount(amount)

        for _ in range(self.max_retries):
            account = self._get_account(user_id)
            expected_version = account.version
            outstanding = aggregate.total_societal_debt - account.applied_total

            application = apply_credit(
                replace(aggregate, total_societal_debt=outstanding),
                amount,
                user_id=user_id,
            )

            result = self.db.execute(
                update(CreditAccount)
                .where(CreditAccount.user_id == user_id, CreditAccount.version == expected_version)
                .values(applied_total=CreditAccount.applied_total + amount, version=CreditAccount.version + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                continue

            entry = application.ledger_entry
            self.db.add(
                CreditLedgerEntryRecord(
                    user_id=user_id,
                    sequence=expected_version + 1,
                    snapshot_id=snapshot_id,
                    applied_amount=entry.applied_amount,
                    resulting_debt=entry.resulting_debt,
                    applied_at=entry.timestamp,
                )
            )
            self.db.flush()
            return application

        raise CreditConflictError(f"Could not apply credit for {user_id} after {self.max_retries} attempts")

    def list_entries(self, user_id: str, limit: int = 20) -> List[CreditLedgerEntry]:
        """Ledger entries for a user, newest first"""
        records = (
            self.db.query(CreditLedgerEntryRecord)
            .filter(CreditLedgerEntryRecord.user_id == user_id)
            .order_by(CreditLedgerEntryRecord.sequence.desc())
            .limit(limit)
            .all()
        )
        return [
            CreditLedgerEntry(
                applied_amount=r.applied_amount,
                timestamp=r.applied_at,
                resulting_debt=r.resulting_debt,
                user_id=r.user_id,
            )
            for r in records
        ]
