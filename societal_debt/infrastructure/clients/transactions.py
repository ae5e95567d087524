"""Transaction feed HTTP client for fetching a user's purchases"""

import httpx
from datetime import date
from typing import List
from societal_debt.domain.models import Transaction
from societal_debt.domain.exceptions import TransactionFeedError
from societal_debt.config import settings


class TransactionFeedClient:
    """Client for the external transaction feed"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.transaction_feed_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def get_transactions(self, user_id: str) -> List[Transaction]:
        """
        Fetch the connected account's transactions for a user.

        Raises:
            TransactionFeedError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/transactions",
                    params={"user_id": user_id},
                )
                response.raise_for_status()
                data = response.json()

                return [parse_transaction(txn) for txn in data.get("transactions", [])]

            except httpx.TimeoutException as e:
                raise TransactionFeedError(f"Transaction feed timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise TransactionFeedError(f"Transaction feed error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise TransactionFeedError(f"Transaction feed unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise TransactionFeedError(f"Invalid transaction data from feed: {e}") from e


def parse_transaction(txn: dict) -> Transaction:
    """Build a Transaction from a feed record ("name" is the merchant)"""
    return Transaction(
        transaction_id=str(txn.get("transaction_id") or txn.get("id") or f"{txn['date']}-{txn['name']}-{txn['amount']}"),
        date=date.fromisoformat(txn["date"]),
        merchant_name=txn["name"],
        amount=float(txn["amount"]),
    )
