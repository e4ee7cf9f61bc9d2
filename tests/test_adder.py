import logging
import math

import pytest

from fstweight.adder import Adder, LogAdder, RealAdder, SignedLogAdder, adder
from fstweight.scalar.float_weight import (
    LogWeight,
    LogWeight64,
    RealWeight,
    RealWeight64,
    TropicalWeight,
)
from fstweight.scalar.signed_log import SignedLogWeight, SignedLogWeight64
from fstweight.sequence.string_weight import LeftStringWeight
from fstweight.weight.ops import approx_equal, minus, plus

logger = logging.getLogger(__name__)


@pytest.mark.parametrize(
    "initial,adder_type",
    [
        (TropicalWeight.zero(), Adder),
        (LeftStringWeight.zero(), Adder),
        (LogWeight.zero(), LogAdder),
        (LogWeight64.zero(), LogAdder),
        (RealWeight.zero(), RealAdder),
        (RealWeight64.zero(), RealAdder),
        (SignedLogWeight.zero(), SignedLogAdder),
    ],
)
def test_adder_dispatch(initial, adder_type):
    assert type(adder(initial)) is adder_type


@pytest.mark.parametrize("W", [TropicalWeight, LogWeight, RealWeight])
def test_adder_matches_plus(W):
    n = 1000
    total = W.zero()
    acc = adder(W.zero())
    for _ in range(n):
        total = plus(total, W.one())
        acc.add(W.one())
    assert approx_equal(total, acc.sum())


@pytest.mark.parametrize(
    "W,expected",
    [(LogWeight, LogWeight(-math.log(1000))), (RealWeight, RealWeight(1000))],
)
def test_adder_is_accurate(W, expected):
    acc = adder(W.zero())
    for _ in range(1000):
        acc.add(W.one())
    assert acc.sum().approx_equal(expected, delta=1e-5)


def test_signed_adder_matches_plus_and_minus():
    W = SignedLogWeight64
    n = 1000
    total = W.zero()
    acc = adder(W.zero())
    minus_one = minus(W.zero(), W.one())
    for i in range(n):
        if i < n // 4 or i > 3 * n // 4:
            total = plus(total, W.one())
            acc.add(W.one())
        else:
            total = minus(total, W.one())
            acc.add(minus_one)
    assert approx_equal(total, acc.sum())
    assert not acc.sum().positive
    assert acc.sum().approx_equal(W(-1, -math.log(2)))


def test_signed_adder_cancels_to_zero():
    acc = adder(SignedLogWeight.zero())
    acc.add(SignedLogWeight(1, 2))
    acc.add(SignedLogWeight(-1, 2))
    assert acc.sum() == SignedLogWeight.zero()


def test_add_returns_running_sum():
    acc = adder(RealWeight(1))
    assert acc.add(RealWeight(2)) == RealWeight(3)
    assert acc.sum() == RealWeight(3)


def test_reset():
    acc = adder(LogWeight.zero())
    acc.add(LogWeight(1))
    acc.reset()
    assert acc.sum() == LogWeight.zero()
    acc.reset(LogWeight(2))
    assert acc.sum() == LogWeight(2)


@pytest.mark.parametrize("W", [LogWeight, RealWeight, SignedLogWeight])
def test_sentinel_is_sticky(W):
    acc = adder(W.one())
    acc.add(W.no_weight())
    acc.add(W.one())
    assert not acc.sum().member()
