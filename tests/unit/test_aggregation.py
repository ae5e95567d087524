"""Unit tests for aggregation of scored transactions"""

import math
import random

import pytest
from datetime import date
from societal_debt.domain.aggregation import (
    aggregate,
    impact_score,
    positive_impact_total,
    purchase_split,
    top_negative_categories,
    vendor_breakdown,
)
from societal_debt.domain.models import (
    UNCATEGORIZED,
    PracticeAssignment,
    Polarity,
    Remediation,
    ScoredTransaction,
    Transaction,
)
from societal_debt.domain.scoring import score_transaction, score_transactions


def _scored(transaction_id: str, amount: float, debt: float) -> ScoredTransaction:
    return ScoredTransaction(
        transaction=Transaction(transaction_id, date(2025, 2, 1), "Shop", amount),
        assignments=[],
        practice_debts={},
        societal_debt=debt,
    )


def test_aggregate_totals_and_percentage():
    """Debts 50 and -20 on spends 100 and 40 -> 30 of 140 (~21.43%)"""
    scored = [
        score_transaction(
            Transaction("1", date(2025, 2, 1), "Burger Barn", 100),
            [PracticeAssignment("Factory Farming", Polarity.UNETHICAL, 50)],
        ),
        score_transaction(
            Transaction("2", date(2025, 2, 2), "Farmers Market", 40),
            [PracticeAssignment("Local Sourcing", Polarity.ETHICAL, 50)],
        ),
    ]

    result = aggregate(scored)

    assert result.total_societal_debt == 30
    assert result.total_spent == 140
    assert result.debt_percentage == pytest.approx(21.43, abs=0.01)


def test_aggregate_empty_input():
    """Nothing to aggregate yields zeros and empty views"""
    result = aggregate([])

    assert result.total_societal_debt == 0
    assert result.total_spent == 0
    assert result.debt_percentage == 0
    assert result.per_practice == {}
    assert result.per_category == []


def test_debt_percentage_zero_without_spend():
    """No division by zero when nothing was spent, even with debt present"""
    result = aggregate([_scored("1", 0, 12.5)])

    assert result.total_societal_debt == 12.5
    assert result.debt_percentage == 0


def test_total_is_order_independent():
    """Total debt is the exact sum regardless of input order"""
    debts = [0.1] * 10 + [1e16, 3.3, -1e16, -0.7, 2.2]
    scored = [_scored(str(i), 10, d) for i, d in enumerate(debts)]
    shuffled = list(scored)
    random.Random(7).shuffle(shuffled)

    forward = aggregate(scored).total_societal_debt
    backward = aggregate(list(reversed(scored))).total_societal_debt

    assert forward == backward == aggregate(shuffled).total_societal_debt
    assert math.isclose(forward, math.fsum(debts), abs_tol=1e-9)


def test_aggregate_is_idempotent(sample_classified):
    """Same input list, identical output"""
    scored = score_transactions(sample_classified)

    assert aggregate(scored) == aggregate(scored)


def test_per_practice_sums_across_transactions():
    """A practice's contributions from every transaction are summed"""
    charity = Remediation("Mercy For Animals", "https://mercyforanimals.org")
    scored = score_transactions(
        [
            (
                Transaction("1", date(2025, 2, 1), "Burger Barn", 100),
                [PracticeAssignment("Factory Farming", Polarity.UNETHICAL, 50, "Animal Welfare", remediation=charity)],
            ),
            (
                Transaction("2", date(2025, 2, 2), "Steak House", 40),
                [
                    PracticeAssignment(
                        "Factory Farming",
                        Polarity.UNETHICAL,
                        25,
                        "Food",
                        remediation=Remediation("Other Charity"),
                    )
                ],
            ),
        ]
    )

    total = aggregate(scored).per_practice["Factory Farming"]

    assert total.amount == 60
    assert total.remediation == charity  # First seen is authoritative
    assert total.category == "Animal Welfare"


def test_per_category_grouping_and_order(sample_classified):
    """Categories and their practices are sorted by absolute impact"""
    result = aggregate(score_transactions(sample_classified))

    assert [c.category for c in result.per_category] == ["Animal Welfare", "Climate Change", "Poverty"]
    climate = result.per_category[1]
    assert climate.total_impact == 24
    assert [p.practice_label for p in climate.practices] == ["High Emissions", "Clean Energy"]
    assert result.per_category[2].total_impact == -10


def test_per_category_ties_keep_input_order():
    """Equal absolute impact keeps first-seen order"""
    scored = score_transactions(
        [
            (
                Transaction("1", date(2025, 2, 1), "A", 100),
                [
                    PracticeAssignment("Beta", Polarity.ETHICAL, 10, "Second"),
                    PracticeAssignment("Alpha", Polarity.UNETHICAL, 10, "First"),
                ],
            ),
        ]
    )

    result = aggregate(scored)

    assert [c.category for c in result.per_category] == ["Second", "First"]


def test_missing_category_defaults_to_uncategorized():
    """Assignments without a category land in Uncategorized"""
    scored = score_transactions(
        [
            (
                Transaction("1", date(2025, 2, 1), "A", 10),
                [PracticeAssignment("Excessive Packaging", Polarity.UNETHICAL, 50, category="")],
            ),
        ]
    )

    result = aggregate(scored)

    assert result.per_category[0].category == UNCATEGORIZED
    assert result.per_practice["Excessive Packaging"].category == UNCATEGORIZED


def test_positive_impact_total(sample_classified):
    """Available credit is the magnitude of all ethical contributions"""
    assert positive_impact_total(score_transactions(sample_classified)) == 18


def test_purchase_split(sample_classified):
    """Mixed transactions count toward both sides"""
    split = purchase_split(score_transactions(sample_classified))

    assert split.positive_amount == 130
    assert split.negative_amount == 180


def test_top_negative_categories(sample_classified):
    """Only unethical contributions rank categories"""
    ranked = top_negative_categories(score_transactions(sample_classified))

    assert ranked == [("Animal Welfare", 50), ("Climate Change", 32)]


def test_vendor_breakdown(sample_classified):
    """Vendors sorted by absolute debt with their practices"""
    vendors = vendor_breakdown(score_transactions(sample_classified))

    assert [v.merchant_name for v in vendors] == ["Burger Barn", "City Power", "Equal Exchange", "Corner Books"]
    power = vendors[1]
    assert power.societal_debt == 24
    assert power.debt_percentage == pytest.approx(30)
    assert [p.practice_label for p in power.practices] == ["High Emissions", "Clean Energy"]
    assert vendors[3].practices == []


def test_impact_score_capped(sample_classified):
    """Heavily unethical spending caps at 100"""
    assert impact_score(score_transactions(sample_classified)) == 100


def test_impact_score_scaled():
    """2 * negative / positive, scaled by 25"""
    scored = score_transactions(
        [
            (Transaction("1", date(2025, 2, 1), "A", 20), [PracticeAssignment("X", Polarity.UNETHICAL, 10)]),
            (Transaction("2", date(2025, 2, 1), "B", 100), [PracticeAssignment("Y", Polarity.ETHICAL, 100)]),
        ]
    )

    assert impact_score(scored) == 1


def test_impact_score_without_positive_impact():
    """No ethical contribution returns the unscaled value; practice-free spend adds nothing"""
    scored = score_transactions(
        [
            (Transaction("1", date(2025, 2, 1), "A", 100), [PracticeAssignment("X", Polarity.UNETHICAL, 50)]),
            (Transaction("2", date(2025, 2, 1), "B", 30), []),
        ]
    )

    assert impact_score(scored) == 100


def test_impact_score_empty():
    assert impact_score([]) == 0


def test_aggregate_infers_polarity_for_debts_without_assignments():
    """Debts supplied without their assignments still group under Uncategorized"""
    scored = ScoredTransaction(
        transaction=Transaction("1", date(2025, 2, 1), "Shop", 100),
        assignments=[],
        practice_debts={"Overpackaging": 10, "Refill Program": -5},
        societal_debt=5,
    )

    result = aggregate([scored])

    assert result.per_practice["Overpackaging"].polarity == Polarity.UNETHICAL
    assert result.per_practice["Refill Program"].polarity == Polarity.ETHICAL
    assert [c.category for c in result.per_category] == [UNCATEGORIZED]
    assert vendor_breakdown([scored])[0].practices[0].practice_label == "Overpackaging"


def test_repeated_label_metadata_follows_kept_amount():
    """Inside a transaction the last assignment wins; across transactions the first"""
    first = score_transaction(
        Transaction("1", date(2025, 2, 1), "Shop", 100),
        [
            PracticeAssignment("Water Waste", Polarity.UNETHICAL, 10, "Oceans", remediation=Remediation("Ocean Fund")),
            PracticeAssignment("Water Waste", Polarity.UNETHICAL, 30, "Water", remediation=Remediation("Water.org")),
        ],
    )
    second = score_transaction(
        Transaction("2", date(2025, 2, 2), "Shop", 100),
        [PracticeAssignment("Water Waste", Polarity.UNETHICAL, 20, "Drought", remediation=Remediation("Drought Aid"))],
    )

    result = aggregate([first, second])
    total = result.per_practice["Water Waste"]

    assert total.amount == 50
    assert total.category == "Water"
    assert total.remediation.name == "Water.org"
    assert [c.category for c in result.per_category] == ["Water"]
