"""/v1/credit - apply user credit against societal debt and list the ledger"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from societal_debt.api.v1.schemas import CreditEntrySchema, CreditHistoryResponse, CreditRequest, CreditResponse
from societal_debt.api.dependencies import get_request_id
from societal_debt.infrastructure.database.session import get_db
from societal_debt.infrastructure.database.repositories import CreditLedgerRepository, SnapshotRepository
from societal_debt.domain.exceptions import CreditConflictError, InvalidCreditAmountError, NoImpactDataError
from societal_debt.infrastructure.observability.metrics import record_credit
from societal_debt.infrastructure.observability.logging import log_credit_application

router = APIRouter()


@router.post("/credit", response_model=CreditResponse)
def apply_credit_to_debt(
    request_body: CreditRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Offset the user's societal debt with a credit.

    The credit is taken off the latest scored total minus earlier credits.
    It may exceed the available positive impact, leaving a negative
    (net positive) total. Per-transaction figures are never rewritten.
    """
    request_id = get_request_id(request)

    try:
        snapshot_repo = SnapshotRepository(db)
        snapshot = snapshot_repo.get_latest(request_body.user_id)
        if snapshot is None:
            raise NoImpactDataError(f"No scored transactions for user {request_body.user_id}")

        application = CreditLedgerRepository(db).append_credit(
            user_id=request_body.user_id,
            aggregate=snapshot_repo.to_aggregate(snapshot),
            amount=request_body.amount,
            snapshot_id=snapshot.id,
        )
        db.commit()

        entry = application.ledger_entry
        record_credit(entry.applied_amount, entry.resulting_debt)
        log_credit_application(request_id, request_body.user_id, entry.applied_amount, entry.resulting_debt)

        return CreditResponse(
            user_id=request_body.user_id,
            new_total_societal_debt=application.new_total_societal_debt,
            entry=CreditEntrySchema(
                applied_amount=entry.applied_amount,
                resulting_debt=entry.resulting_debt,
                timestamp=entry.timestamp,
            ),
        )

    except InvalidCreditAmountError as e:
        db.rollback()
        logging.warning(f"Invalid credit: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except NoImpactDataError as e:
        db.rollback()
        logging.warning(f"No impact data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except CreditConflictError as e:
        db.rollback()
        logging.error(f"Credit conflict: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail="Concurrent credit update, please retry")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/credit/history", response_model=CreditHistoryResponse)
def get_credit_history(
    user_id: str = Query(..., description="User identifier"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Retrieve applied credits for a user.

    Returns:
        Ledger entries, newest first
    """
    entries = CreditLedgerRepository(db).list_entries(user_id, limit=limit)

    return CreditHistoryResponse(
        user_id=user_id,
        entries=[
            CreditEntrySchema(
                applied_amount=e.applied_amount,
                resulting_debt=e.resulting_debt,
                timestamp=e.timestamp,
            )
            for e in entries
        ],
    )
