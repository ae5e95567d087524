"""Unit tests for per-practice debt amounts"""

import math

import pytest
from societal_debt.domain.ledger import clamp_weight, practice_amount, resolve_weight
from societal_debt.domain.models import Polarity


def test_practice_amount_unethical_is_positive():
    """Unethical practice adds amount * weight / 100"""
    assert practice_amount(100, 50, Polarity.UNETHICAL) == 50


def test_practice_amount_ethical_is_negated():
    """Ethical practice offsets debt"""
    assert practice_amount(50, 20, Polarity.ETHICAL) == -10


@pytest.mark.parametrize("weight, expected", [(-20, 0.0), (150, 100.0), (0, 0.0), (100, 100.0), (37.5, 37.5)])
def test_clamp_weight(weight, expected):
    """Out-of-range weights are clamped instead of rejected"""
    assert clamp_weight(weight) == expected


def test_practice_amount_clamps_noisy_weights():
    """Classifier noise never yields more than the full amount or a flipped sign"""
    assert practice_amount(80, 250, Polarity.UNETHICAL) == 80
    assert practice_amount(80, -30, Polarity.UNETHICAL) == 0
    assert practice_amount(80, 250, Polarity.ETHICAL) == -80


@pytest.mark.parametrize("weight", [None, float("nan"), float("inf")])
def test_missing_weight_means_full_attribution(weight):
    """An unweighted classification attributes the whole amount"""
    assert resolve_weight(weight) == 100
    assert practice_amount(40, weight, Polarity.UNETHICAL) == 40


def test_negative_transaction_amount_treated_as_zero():
    """Refund-style negative amounts contribute nothing"""
    assert practice_amount(-25, 50, Polarity.UNETHICAL) == 0
    assert practice_amount(-25, 50, Polarity.ETHICAL) == 0


@pytest.mark.parametrize("amount", [0, 0.01, 12.34, 999.99, 10_000])
@pytest.mark.parametrize("weight", [-5, 0, 33.3, 100, 120, None])
def test_polarity_sign_invariant(amount, weight):
    """Unethical never goes negative, ethical never goes positive"""
    unethical = practice_amount(amount, weight, Polarity.UNETHICAL)
    ethical = practice_amount(amount, weight, Polarity.ETHICAL)

    assert unethical >= 0
    assert ethical <= 0
    assert math.isclose(unethical, -ethical, abs_tol=1e-12)
