import functools
from typing import Type

from fstweight.composite.pair import PairWeight
from fstweight.weight.ops import Weight, WeightProperties


@functools.lru_cache(maxsize=None)
def _expectation_weight(
    w1: Type[Weight], w2: Type[Weight]
) -> Type["ExpectationWeight"]:
    return type(
        f"ExpectationWeight[{w1.__name__}, {w2.__name__}]",
        (ExpectationWeight,),
        {"__slots__": (), "W1": w1, "W2": w2},
    )


class ExpectationWeight(PairWeight):
    """
    Pairs ``(p, v)`` of a probability ``p`` and an expected value ``v``,
    used to compute expectations over the paths of a machine.

    ``Plus`` is componentwise and ``Times`` follows the product rule:

    .. math::

        (p_1, v_1) \\otimes (p_2, v_2) = (p_1 p_2, p_1 v_2 + v_1 p_2)

    ``W2`` is either ``W1`` or a (sparse) power of ``W1``, which ``W1``
    weights multiply componentwise. ``Zero`` is ``(0, 0)`` and ``One`` is
    ``(1, 0)`` in the component semirings. Expectation weights are not
    divisible.
    """

    __slots__ = ()

    def __class_getitem__(cls, params):
        w1, w2 = params
        return _expectation_weight(w1, w2)

    @classmethod
    def one(cls):
        return cls(cls.W1.one(), cls.W2.zero())

    @classmethod
    def type_name(cls) -> str:
        return f"expectation_{cls.W1.type_name()}_{cls.W2.type_name()}"

    @classmethod
    def properties(cls) -> WeightProperties:
        return (
            cls.W1.properties()
            & cls.W2.properties()
            & (WeightProperties.SEMIRING | WeightProperties.COMMUTATIVE)
        )

    @classmethod
    def reverse_type(cls):
        return ExpectationWeight[cls.W1.reverse_type(), cls.W2.reverse_type()]

    def plus(self, other):
        return type(self)(
            self._value1.plus(other._value1), self._value2.plus(other._value2)
        )

    def times(self, other):
        p1, v1 = self._value1, self._value2
        p2, v2 = other._value1, other._value2
        return type(self)(p1 * p2, p1 * v2 + v1 * p2)
