"""SQLAlchemy ORM models for impact snapshots and the credit ledger"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Float, DateTime, Integer, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImpactSnapshot(Base):
    """Aggregate result computed for a user's scored transactions"""

    __tablename__ = "impact_snapshot"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    total_societal_debt = Column(Float, nullable=False)
    total_spent = Column(Float, nullable=False)
    debt_percentage = Column(Float, nullable=False)
    transaction_count = Column(Integer, nullable=False)
    per_practice = Column(JSON, nullable=False)
    per_category = Column(JSON, nullable=False)
    scored_transactions = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class CreditAccount(Base):
    """Running credit total per user; version drives compare-and-swap appends"""

    __tablename__ = "credit_account"

    user_id = Column(Text, primary_key=True)
    applied_total = Column(Float, nullable=False, default=0.0)
    version = Column(Integer, nullable=False, default=0)

    entries = relationship("CreditLedgerEntryRecord", back_populates="account", order_by="CreditLedgerEntryRecord.sequence")


class CreditLedgerEntryRecord(Base):
    """Append-only credit ledger row"""

    __tablename__ = "credit_ledger_entry"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey("credit_account.user_id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    snapshot_id = Column(Uuid(as_uuid=True), ForeignKey("impact_snapshot.id"), nullable=True)
    applied_amount = Column(Float, nullable=False)
    resulting_debt = Column(Float, nullable=False)
    applied_at = Column(DateTime(timezone=True), nullable=False)

    account = relationship("CreditAccount", back_populates="entries")
