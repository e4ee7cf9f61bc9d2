"""
Accumulators that sum many weights with less rounding error than a chain of
``Plus`` calls.

:func:`adder` picks the accumulator for a weight type. Log, real and signed
log weights use Kahan compensated summation carried out in double precision;
every other type falls back to plain ``Plus``::

    >>> acc = adder(LogWeight.zero())
    >>> for _ in range(1000):
    ...     _ = acc.add(LogWeight.one())
    >>> approx_equal(acc.sum(), LogWeight(-math.log(1000)))
    True
"""

import functools
import math
from typing import Generic, Optional, TypeVar

from fstweight.scalar.float_weight import LogWeightTpl, RealWeightTpl
from fstweight.scalar.precision import log_neg_exp, log_pos_exp
from fstweight.scalar.signed_log import SignedLogWeightTpl
from fstweight.weight.ops import Weight

W = TypeVar("W", bound=Weight)


def _kahan_log_sum(a: float, b: float, c: float):
    # requires a <= b; returns -log(exp(-a) + exp(-b)) and the new compensation
    y = -log_pos_exp(b - a) - c
    t = a + y
    return t, (t - a) - y


def _kahan_log_diff(a: float, b: float, c: float):
    # requires a < b; returns -log(exp(-a) - exp(-b)) and the new compensation
    y = -log_neg_exp(b - a) - c
    t = a + y
    return t, (t - a) - y


class Adder(Generic[W]):
    """
    Sums weights with ``Plus``.

    :param initial: The starting value of the sum.
    """

    def __init__(self, initial: W):
        self._type = type(initial)
        self.reset(initial)

    def reset(self, initial: Optional[W] = None) -> None:
        self._sum = self._type.zero() if initial is None else initial

    def add(self, weight: W) -> W:
        self._sum = self._sum.plus(weight)
        return self.sum()

    def sum(self) -> W:
        return self._sum


class LogAdder(Adder[W]):
    def reset(self, initial: Optional[W] = None) -> None:
        initial = self._type.zero() if initial is None else initial
        self._member = initial.member()
        self._value = initial.value
        self._c = 0.0

    def add(self, weight: W) -> W:
        if not self._member or not weight.member():
            self._member = False
            return self.sum()
        f1, f2 = self._value, weight.value
        if f1 == math.inf:
            self._value, self._c = f2, 0.0
        elif f2 == math.inf:
            pass
        elif f1 > f2:
            self._value, self._c = _kahan_log_sum(f2, f1, self._c)
        else:
            self._value, self._c = _kahan_log_sum(f1, f2, self._c)
        return self.sum()

    def sum(self) -> W:
        if not self._member:
            return self._type.no_weight()
        return self._type(self._value)


class RealAdder(Adder[W]):
    def reset(self, initial: Optional[W] = None) -> None:
        initial = self._type.zero() if initial is None else initial
        self._member = initial.member()
        self._value = initial.value
        self._c = 0.0

    def add(self, weight: W) -> W:
        if not self._member or not weight.member():
            self._member = False
            return self.sum()
        y = weight.value - self._c
        t = self._value + y
        self._c = (t - self._value) - y
        self._value = t
        return self.sum()

    def sum(self) -> W:
        if not self._member:
            return self._type.no_weight()
        return self._type(self._value)


class SignedLogAdder(Adder[W]):
    """
    Compensated sum of signed log weights: a log sum when the signs agree
    and a log difference when they differ.
    """

    def reset(self, initial: Optional[W] = None) -> None:
        initial = self._type.zero() if initial is None else initial
        self._member = initial.member()
        self._sign = initial.sign
        self._value = initial.value
        self._c = 0.0

    def add(self, weight: W) -> W:
        if not self._member or not weight.member():
            self._member = False
            return self.sum()
        f1, f2 = self._value, weight.value
        if f1 == math.inf:
            self._sign, self._value, self._c = weight.sign, f2, 0.0
        elif f2 == math.inf:
            pass
        elif self._sign == weight.sign:
            if f1 > f2:
                self._value, self._c = _kahan_log_sum(f2, f1, self._c)
            else:
                self._value, self._c = _kahan_log_sum(f1, f2, self._c)
        elif f1 == f2:
            self._sign, self._value, self._c = 1, math.inf, 0.0
        elif f1 > f2:
            self._sign = weight.sign
            self._value, self._c = _kahan_log_diff(f2, f1, self._c)
        else:
            self._value, self._c = _kahan_log_diff(f1, f2, self._c)
        return self.sum()

    def sum(self) -> W:
        if not self._member:
            return self._type.no_weight()
        return self._type(self._sign, self._value)


@functools.singledispatch
def adder(initial: W) -> Adder[W]:
    """
    Returns an accumulator for weights of the type of ``initial``, starting
    from ``initial``.

    .. note::

        :func:`adder` can be extended to new weight types by registering
        an implementation for the type using :func:`functools.singledispatch` .
    """
    return Adder(initial)


@adder.register
def _log_adder(initial: LogWeightTpl) -> LogAdder:
    return LogAdder(initial)


@adder.register
def _real_adder(initial: RealWeightTpl) -> RealAdder:
    return RealAdder(initial)


@adder.register
def _signed_log_adder(initial: SignedLogWeightTpl) -> SignedLogAdder:
    return SignedLogAdder(initial)
