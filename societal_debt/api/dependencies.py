"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from societal_debt.infrastructure.clients.classifier import ClassifierClient
from societal_debt.infrastructure.clients.transactions import TransactionFeedClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_classifier_client() -> ClassifierClient:
    """Provide classification gateway client instance"""
    return ClassifierClient()


def get_transaction_feed_client() -> TransactionFeedClient:
    """Provide transaction feed client instance"""
    return TransactionFeedClient()
