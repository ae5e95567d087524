"""/v1/impact - score classified transactions and read back the latest result"""

import time
import logging
from typing import List, Sequence, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from societal_debt.api.v1.schemas import (
    AggregateSchema,
    AnalyzeRequest,
    CategoryAmountSchema,
    ImpactResponse,
    InsightsSchema,
    ScoreRequest,
    ScoredTransactionSchema,
    VendorSchema,
)
from societal_debt.api.dependencies import get_classifier_client, get_request_id, get_transaction_feed_client
from societal_debt.infrastructure.database.session import get_db
from societal_debt.infrastructure.database.repositories import SnapshotRepository
from societal_debt.infrastructure.clients.classifier import ClassifierClient
from societal_debt.infrastructure.clients.transactions import TransactionFeedClient
from societal_debt.domain.aggregation import (
    aggregate,
    impact_score,
    positive_impact_total,
    purchase_split,
    top_negative_categories,
    vendor_breakdown,
)
from societal_debt.domain.exceptions import ClassifierAPIError, TransactionFeedError
from societal_debt.domain.models import AggregateResult, PracticeAssignment, ScoredTransaction, Transaction
from societal_debt.domain.scoring import score_transactions
from societal_debt.domain.validation import find_data_quality_issues
from societal_debt.infrastructure.observability.metrics import (
    data_quality_counter,
    feed_fetch_failures_counter,
    record_scoring,
)
from societal_debt.infrastructure.observability.logging import log_data_quality_issue, log_scoring
from societal_debt.utils.serialization import to_primitive

router = APIRouter()

Classified = Sequence[Tuple[Transaction, Sequence[PracticeAssignment]]]


def build_insights(scored: List[ScoredTransaction]) -> InsightsSchema:
    """Dashboard figures: available credit, ethics score, vendor and category rankings"""
    split = purchase_split(scored)
    return InsightsSchema(
        available_credit=positive_impact_total(scored),
        impact_score=impact_score(scored),
        positive_purchases=split.positive_amount,
        negative_purchases=split.negative_amount,
        top_negative_categories=[
            CategoryAmountSchema(category=category, amount=amount)
            for category, amount in top_negative_categories(scored)
        ],
        vendors=[VendorSchema.model_validate(to_primitive(v)) for v in vendor_breakdown(scored)],
    )


def build_impact_response(
    user_id: str,
    snapshot_id: str,
    aggregate_result: AggregateResult,
    scored: List[ScoredTransaction],
    created_at: str,
) -> ImpactResponse:
    return ImpactResponse(
        user_id=user_id,
        snapshot_id=snapshot_id,
        aggregate=AggregateSchema.model_validate(to_primitive(aggregate_result)),
        insights=build_insights(scored),
        transactions=[ScoredTransactionSchema.model_validate(to_primitive(s)) for s in scored],
        created_at=created_at,
    )


def report_data_quality(classified: Classified, request_id: str) -> int:
    """Log and count every tolerated classifier defect; returns how many were found"""
    count = 0
    for transaction, assignments in classified:
        for issue in find_data_quality_issues(transaction, assignments):
            data_quality_counter.labels(code=issue.code).inc()
            log_data_quality_issue(issue, request_id)
            count += 1
    return count


def score_and_persist(user_id: str, classified: Classified, db: Session, request_id: str) -> ImpactResponse:
    """
    Score, aggregate and snapshot a user's classified transactions.

    Flow:
    1. Report data quality issues (never fatal)
    2. Score every transaction
    3. Aggregate totals and grouped views
    4. Persist the snapshot
    """
    start_time = time.time()

    report_data_quality(classified, request_id)
    scored = score_transactions(classified)
    aggregate_result = aggregate(scored)

    snapshot = SnapshotRepository(db).create_snapshot(user_id, aggregate_result, scored)
    db.commit()

    duration_ms = (time.time() - start_time) * 1000
    record_scoring(len(scored), aggregate_result.debt_percentage)
    log_scoring(
        request_id,
        user_id,
        len(scored),
        aggregate_result.total_societal_debt,
        aggregate_result.debt_percentage,
        duration_ms,
    )

    return build_impact_response(
        user_id,
        str(snapshot.id),
        aggregate_result,
        scored,
        snapshot.created_at.isoformat(),
    )


@router.post("/impact/score", response_model=ImpactResponse)
def score_impact(
    request_body: ScoreRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Score transactions whose classification the caller already holds.

    Returns:
        Aggregate totals, grouped views, dashboard insights and the scored
        transactions for drill-down
    """
    request_id = get_request_id(request)
    classified = [
        (item.transaction.to_domain(), [a.to_domain() for a in item.assignments])
        for item in request_body.transactions
    ]

    try:
        return score_and_persist(request_body.user_id, classified, db, request_id)
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/impact/analyze", response_model=ImpactResponse)
async def analyze_impact(
    request_body: AnalyzeRequest,
    request: Request,
    db: Session = Depends(get_db),
    feed_client: TransactionFeedClient = Depends(get_transaction_feed_client),
    classifier_client: ClassifierClient = Depends(get_classifier_client),
):
    """
    Fetch, classify and score a user's transactions.

    Flow:
    1. Fetch transactions from the transaction feed
    2. Classify them through the classification gateway
    3. Score, aggregate and persist
    """
    request_id = get_request_id(request)

    try:
        transactions = await feed_client.get_transactions(request_body.user_id)
        classified = await classifier_client.classify(transactions)
        return score_and_persist(request_body.user_id, classified, db, request_id)

    except TransactionFeedError as e:
        feed_fetch_failures_counter.inc()
        db.rollback()
        logging.error(f"Transaction feed error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction feed unavailable")

    except ClassifierAPIError as e:
        db.rollback()
        logging.error(f"Classifier error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Classification service unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/impact/latest", response_model=ImpactResponse)
def get_latest_impact(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Retrieve the most recent scored result for a user.

    Credits are not reflected here; see /v1/credit/history.
    """
    snapshot_repo = SnapshotRepository(db)
    snapshot = snapshot_repo.get_latest(user_id)

    if not snapshot:
        raise HTTPException(status_code=404, detail="No impact data for user")

    return build_impact_response(
        user_id,
        str(snapshot.id),
        snapshot_repo.to_aggregate(snapshot),
        snapshot_repo.to_scored_transactions(snapshot),
        snapshot.created_at.isoformat(),
    )
