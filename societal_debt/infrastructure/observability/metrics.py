"""Prometheus metrics for monitoring scoring volume, credit usage and classifier health"""

from prometheus_client import Counter, Histogram

# Scoring metrics
transactions_scored_counter = Counter(
    "societal_debt_transactions_scored_total",
    "Transactions run through the scorer",
)

debt_percentage_histogram = Histogram(
    "societal_debt_debt_percentage",
    "Debt percentage per scoring request",
    buckets=[-50, -10, 0, 5, 10, 20, 50, 100],
)

data_quality_counter = Counter(
    "societal_debt_data_quality_issues_total",
    "Tolerated defects in classifier output",
    ["code"],  # missing_weight | duplicate_label | ...
)

# Credit metrics
credit_applied_counter = Counter(
    "societal_debt_credit_applications_total",
    "Credits applied to societal debt",
    ["outcome"],  # debt_remaining | net_positive
)

credit_amount_counter = Counter(
    "societal_debt_credit_applied_amount_total",
    "Sum of credit amounts applied",
)

# External service metrics
classifier_latency_histogram = Histogram(
    "classifier_latency_seconds",
    "Classification gateway response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

classifier_failure_counter = Counter(
    "classifier_failures_total",
    "Failed classification gateway calls",
)

feed_fetch_failures_counter = Counter(
    "transaction_feed_failures_total",
    "Failed transaction feed calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_scoring(transaction_count: int, debt_percentage: float) -> None:
    """Record scoring volume and the resulting debt percentage"""
    transactions_scored_counter.inc(transaction_count)
    debt_percentage_histogram.observe(debt_percentage)


def record_credit(applied_amount: float, resulting_debt: float) -> None:
    """Record a credit application and whether it pushed the user net positive"""
    outcome = "net_positive" if resulting_debt < 0 else "debt_remaining"
    credit_applied_counter.labels(outcome=outcome).inc()
    credit_amount_counter.inc(applied_amount)
