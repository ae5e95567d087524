"""Aggregator - rolls scored transactions up into totals and grouped views"""

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from societal_debt.domain.catalog import PracticeCatalog
from societal_debt.domain.models import (
    AggregateResult,
    CategoryGroup,
    Polarity,
    PracticeAssignment,
    PracticeImpact,
    PracticeTotal,
    PurchaseSplit,
    ScoredTransaction,
    VendorSummary,
)
from societal_debt.utils.numeric import exact_sum, safe_percentage

IMPACT_SCORE_SCALE = 25
IMPACT_SCORE_CAP = 100


def spent_amount(scored: ScoredTransaction) -> float:
    """Amount counted toward total spend (negative amounts count as 0)"""
    amount = scored.transaction.amount
    return amount if amount > 0 else 0.0


def effective_assignments(scored: ScoredTransaction) -> Dict[str, PracticeAssignment]:
    """Assignment behind each practice debt; a debt with none infers polarity from its sign"""
    effective = scored.effective_assignments()
    for label, amount in scored.practice_debts.items():
        if label not in effective:
            polarity = Polarity.ETHICAL if amount < 0 else Polarity.UNETHICAL
            effective[label] = PracticeAssignment(practice_label=label, polarity=polarity)
    return effective


def build_catalog(scored_transactions: Sequence[ScoredTransaction]) -> PracticeCatalog:
    """
    Catalog of every practice in input order, first transaction wins.

    Within one transaction a repeated label resolves to its last assignment,
    so metadata always travels with the amount that was kept.
    """
    catalog = PracticeCatalog()
    for scored in scored_transactions:
        effective = effective_assignments(scored)
        for label in scored.practice_debts:
            catalog.register(effective[label])
    return catalog


def _by_abs_impact_desc(items: List, key) -> List:
    # sorted() is stable, so ties keep first-seen order
    return sorted(items, key=lambda item: -abs(key(item)))


def aggregate(scored_transactions: Sequence[ScoredTransaction]) -> AggregateResult:
    """
    Fold scored transactions into totals and per-practice/per-category views.

    Requirements:
    - total_societal_debt is the exact sum of every transaction's debt
    - debt_percentage is 0 when nothing was spent
    - A practice keeps the remediation and category of the first transaction
      it appears in (within that transaction, of the assignment kept)
    - Categories and practices are ordered by descending absolute impact,
      ties in first-seen order

    Same input list in, identical result out.
    """
    total_societal_debt = exact_sum(s.societal_debt for s in scored_transactions)
    total_spent = exact_sum(spent_amount(s) for s in scored_transactions)
    debt_percentage = safe_percentage(total_societal_debt, total_spent)

    catalog = build_catalog(scored_transactions)

    contributions: Dict[str, List[float]] = defaultdict(list)
    for scored in scored_transactions:
        for label, amount in scored.practice_debts.items():
            contributions[label].append(amount)

    per_practice: Dict[str, PracticeTotal] = {}
    for label in catalog:
        metadata = catalog.get(label)
        per_practice[label] = PracticeTotal(
            practice_label=label,
            amount=exact_sum(contributions[label]),
            polarity=metadata.polarity,
            category=metadata.category,
            remediation=metadata.remediation,
        )

    grouped: Dict[str, List[PracticeTotal]] = {}
    for total in per_practice.values():
        grouped.setdefault(total.category, []).append(total)

    per_category = [
        CategoryGroup(
            category=category,
            total_impact=exact_sum(p.amount for p in practices),
            practices=_by_abs_impact_desc(practices, lambda p: p.amount),
        )
        for category, practices in grouped.items()
    ]
    per_category = _by_abs_impact_desc(per_category, lambda c: c.total_impact)

    return AggregateResult(
        total_societal_debt=total_societal_debt,
        total_spent=total_spent,
        debt_percentage=debt_percentage,
        per_practice=per_practice,
        per_category=per_category,
    )


def positive_impact_total(scored_transactions: Sequence[ScoredTransaction]) -> float:
    """Magnitude of all ethical contributions, i.e. credit available to offset debt"""
    return exact_sum(
        -amount
        for scored in scored_transactions
        for amount in scored.practice_debts.values()
        if amount < 0
    )


def purchase_split(scored_transactions: Sequence[ScoredTransaction]) -> PurchaseSplit:
    """Spend on transactions with ethical practices vs. with unethical ones"""
    positive: List[float] = []
    negative: List[float] = []

    for scored in scored_transactions:
        polarities = {a.polarity for a in scored.effective_assignments().values()}
        if Polarity.ETHICAL in polarities or scored.societal_debt < 0:
            positive.append(spent_amount(scored))
        if Polarity.UNETHICAL in polarities or scored.societal_debt > 0:
            negative.append(spent_amount(scored))

    return PurchaseSplit(positive_amount=exact_sum(positive), negative_amount=exact_sum(negative))


def top_negative_categories(
    scored_transactions: Sequence[ScoredTransaction],
    limit: int = 3,
) -> List[Tuple[str, float]]:
    """Categories ranked by unethical contribution, for recommending offsets"""
    catalog = build_catalog(scored_transactions)
    categories: Dict[str, List[float]] = {}

    for scored in scored_transactions:
        for label, amount in scored.practice_debts.items():
            if amount <= 0:
                continue
            categories.setdefault(catalog.get(label).category, []).append(amount)

    ranked = [(category, exact_sum(amounts)) for category, amounts in categories.items()]
    ranked.sort(key=lambda item: -item[1])
    return ranked[:limit]


def vendor_breakdown(scored_transactions: Sequence[ScoredTransaction]) -> List[VendorSummary]:
    """Per-merchant spend, debt and practice impact, largest absolute debt first"""
    grouped: Dict[str, List[ScoredTransaction]] = {}
    for scored in scored_transactions:
        name = scored.transaction.merchant_name
        if not name:
            continue
        grouped.setdefault(name, []).append(scored)

    vendors = []
    for name, items in grouped.items():
        total_spent = exact_sum(spent_amount(s) for s in items)
        societal_debt = exact_sum(s.societal_debt for s in items)

        impacts: Dict[str, List[float]] = {}
        polarities: Dict[str, Polarity] = {}
        for scored in items:
            effective = effective_assignments(scored)
            for label, amount in scored.practice_debts.items():
                impacts.setdefault(label, []).append(amount)
                polarities.setdefault(label, effective[label].polarity)

        practices = [
            PracticeImpact(practice_label=label, impact=exact_sum(amounts), polarity=polarities[label])
            for label, amounts in impacts.items()
        ]

        vendors.append(
            VendorSummary(
                merchant_name=name,
                total_spent=total_spent,
                societal_debt=societal_debt,
                debt_percentage=safe_percentage(societal_debt, total_spent),
                transaction_count=len(items),
                practices=_by_abs_impact_desc(practices, lambda p: p.impact),
            )
        )

    return _by_abs_impact_desc(vendors, lambda v: v.societal_debt)


def impact_score(scored_transactions: Sequence[ScoredTransaction]) -> float:
    """
    Overall ethics score, higher is worse.

    Formula: 2 * negative / positive, scaled by 25 and capped at 100.
    With no positive impact at all the unscaled 2 * negative is returned,
    so it can exceed 100.

    negative: sum of unethical contributions
    positive: magnitude of ethical contributions

    Transactions without practices have been analyzed, so they add nothing
    rather than counting as neutral spend.
    """
    if not scored_transactions:
        return 0.0

    positive = positive_impact_total(scored_transactions)
    negative = exact_sum(
        amount
        for scored in scored_transactions
        for amount in scored.practice_debts.values()
        if amount > 0
    )

    if positive == 0:
        return negative * 2

    raw_score = (negative * 2) / positive
    return float(min(IMPACT_SCORE_CAP, round(raw_score * IMPACT_SCORE_SCALE)))
