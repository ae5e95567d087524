"""Classification gateway client with exponential backoff retry logic"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from societal_debt.config import settings
from societal_debt.domain.exceptions import ClassifierAPIError
from societal_debt.domain.models import UNCATEGORIZED, PracticeAssignment, Polarity, Remediation, Transaction
from societal_debt.infrastructure.observability.metrics import classifier_failure_counter, classifier_latency_histogram

logger = logging.getLogger(__name__)

Classified = Tuple[Transaction, List[PracticeAssignment]]


class ClassifierClient:
    """Client for the external practice classification service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.classifier_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self.max_retries = settings.classifier_max_retries
        self.backoff_base = settings.classifier_backoff_base

    async def classify(self, transactions: Sequence[Transaction]) -> List[Classified]:
        """
        Classify transactions into ethical/unethical practices.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s (base * 2^attempt)
        - Retries on 5xx errors and network failures, not on 4xx
        - Tracks latency histogram and failure counter

        Returns:
            (transaction, assignments) pairs in input order; transactions the
            classifier did not return get no assignments

        Raises:
            ClassifierAPIError: When retries are exhausted or the response is malformed
        """
        if not transactions:
            return []

        payload = {"transactions": [serialize_transaction(t) for t in transactions]}
        data = await self._post_with_retry(payload)

        try:
            records = data["transactions"]
            if not isinstance(records, list):
                raise TypeError(f"expected a list of records, got {type(records).__name__}")
        except (KeyError, TypeError) as e:
            raise ClassifierAPIError(f"Invalid classification data: {e}") from e

        by_key = {}
        for record in records:
            if not isinstance(record, dict):
                logger.warning("Skipping malformed classifier record", extra={"record_type": type(record).__name__})
                continue
            by_key[record_key(record)] = parse_classification(record)

        classified = []
        for t in transactions:
            assignments = by_key.get(t.transaction_id)
            if assignments is None:
                assignments = by_key.get(composite_key(t), [])
            classified.append((t, assignments))
        return classified

    async def _post_with_retry(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with classifier_latency_histogram.time():
                        response = await client.post(f"{self.base_url}/classify", json=payload)
                        response.raise_for_status()
                    return response.json()

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    classifier_failure_counter.inc()
                    if e.response.status_code < 500 or attempt >= self.max_retries:
                        raise ClassifierAPIError(f"Classifier error: {e.response.status_code}") from e

                except httpx.TimeoutException as e:
                    attempt += 1
                    classifier_failure_counter.inc()
                    if attempt >= self.max_retries:
                        raise ClassifierAPIError(f"Classifier timeout after {self.timeout}s") from e

                except httpx.RequestError as e:
                    attempt += 1
                    classifier_failure_counter.inc()
                    if attempt >= self.max_retries:
                        raise ClassifierAPIError(f"Classifier unreachable: {e}") from e

                except ValueError as e:
                    raise ClassifierAPIError("Invalid JSON from classifier") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(f"Classifier call failed, retrying in {backoff}s", extra={"attempt": attempt})
                await asyncio.sleep(backoff)


def serialize_transaction(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.transaction_id,
        "date": transaction.date.isoformat(),
        "name": transaction.merchant_name,
        "amount": transaction.amount,
    }


def composite_key(transaction: Transaction) -> str:
    return f"{transaction.date.isoformat()}-{transaction.merchant_name}-{transaction.amount}"


def record_key(record: Dict[str, Any]) -> str:
    """Match a classifier record back to its transaction (id, else date-name-amount)"""
    if record.get("id") is not None:
        return str(record["id"])
    return f"{record.get('date')}-{record.get('name')}-{record.get('amount')}"


def _weight(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def _mapping(record: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = record.get(key)
    return value if isinstance(value, dict) else {}


def _remediation(practice: str, polarity: Polarity, charities: Dict[str, Any], note: str) -> Optional[Remediation]:
    if polarity == Polarity.ETHICAL:
        return Remediation(name=practice, note=note or None)

    charity = charities.get(practice)
    if not isinstance(charity, dict) or not charity.get("name"):
        return None
    url = charity.get("url")
    return Remediation(name=str(charity["name"]), url=str(url) if url else None)


def parse_classification(record: Dict[str, Any]) -> List[PracticeAssignment]:
    """
    Turn one classifier record into practice assignments.

    Record shape:
        unethicalPractices / ethicalPractices: lists of labels
        practiceWeights: label -> percent (missing means full attribution)
        practiceCategories: label -> category
        information: label -> short description
        charities: label -> {"name", "url"}
        practiceSearchTerms: label -> charity search term

    Unethical practices come first, then ethical ones, each in record order.
    A malformed optional field degrades to its default for that practice only.
    """
    weights = _mapping(record, "practiceWeights")
    categories = _mapping(record, "practiceCategories")
    information = _mapping(record, "information")
    charities = _mapping(record, "charities")
    search_terms = _mapping(record, "practiceSearchTerms")

    assignments = []
    for polarity, key in ((Polarity.UNETHICAL, "unethicalPractices"), (Polarity.ETHICAL, "ethicalPractices")):
        practices = record.get(key)
        if not isinstance(practices, list):
            continue
        for practice in practices:
            label = str(practice)
            description = str(information.get(label) or "")
            assignments.append(
                PracticeAssignment(
                    practice_label=label,
                    polarity=polarity,
                    weight_percent=_weight(weights.get(label)),
                    category=str(categories.get(label) or "") or UNCATEGORIZED,
                    description=description,
                    remediation=_remediation(label, polarity, charities, description),
                    search_term=_optional_str(search_terms.get(label)),
                )
            )
    return assignments
