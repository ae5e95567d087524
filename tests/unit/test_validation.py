"""Unit tests for classifier data quality checks"""

from datetime import date
from societal_debt.domain.models import PracticeAssignment, Polarity, Transaction
from societal_debt.domain.validation import (
    CONTRADICTORY_POLARITY,
    DUPLICATE_LABEL,
    MISSING_CATEGORY,
    MISSING_WEIGHT,
    NEGATIVE_AMOUNT,
    WEIGHT_OUT_OF_RANGE,
    find_data_quality_issues,
)


def _codes(transaction, assignments):
    return [issue.code for issue in find_data_quality_issues(transaction, assignments)]


def test_clean_classification_has_no_issues():
    """Well-formed output reports nothing"""
    txn = Transaction("1", date(2025, 5, 1), "Shop", 20)
    assignments = [PracticeAssignment("Water Waste", Polarity.UNETHICAL, 20, "Environment")]

    assert _codes(txn, assignments) == []


def test_reports_each_tolerated_defect():
    """Missing weight/category, bad weight, duplicates and polarity clashes"""
    txn = Transaction("1", date(2025, 5, 1), "Shop", -5)
    assignments = [
        PracticeAssignment("A", Polarity.UNETHICAL, None, "Env"),
        PracticeAssignment("B", Polarity.UNETHICAL, 140, "Env"),
        PracticeAssignment("C", Polarity.ETHICAL, 10),
        PracticeAssignment("A", Polarity.UNETHICAL, 20, "Env"),
        PracticeAssignment("B", Polarity.ETHICAL, 20, "Env"),
    ]

    assert _codes(txn, assignments) == [
        NEGATIVE_AMOUNT,
        MISSING_WEIGHT,
        WEIGHT_OUT_OF_RANGE,
        MISSING_CATEGORY,
        DUPLICATE_LABEL,
        CONTRADICTORY_POLARITY,
    ]


def test_issues_name_the_practice():
    """Practice-level issues carry the label and transaction id"""
    txn = Transaction("tx_9", date(2025, 5, 1), "Shop", 10)
    issue = find_data_quality_issues(txn, [PracticeAssignment("★ Animal Testing", Polarity.UNETHICAL, None, "X")])[0]

    assert issue.transaction_id == "tx_9"
    assert issue.practice_label == "★ Animal Testing"
