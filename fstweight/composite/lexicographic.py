import functools
from typing import Type

from fstweight.composite.pair import PairWeight
from fstweight.weight.ops import DivideType, Weight, WeightProperties, natural_less


@functools.lru_cache(maxsize=None)
def _lexicographic_weight(
    w1: Type[Weight], w2: Type[Weight]
) -> Type["LexicographicWeight"]:
    for w in (w1, w2):
        if not w.properties() & WeightProperties.PATH:
            raise TypeError(
                f"LexicographicWeight requires path weight types, got {w.type_name()}."
            )
    return type(
        f"LexicographicWeight[{w1.__name__}, {w2.__name__}]",
        (LexicographicWeight,),
        {"__slots__": (), "W1": w1, "W2": w2},
    )


class LexicographicWeight(PairWeight):
    """
    Pairs ordered lexicographically: ``Plus`` returns whichever argument is
    smaller in the natural order of the first component, or of the second
    component when the first components are equal. ``Times`` and ``Divide``
    are componentwise.

    Both component types must be path semirings. A member cannot pair a
    ``Zero`` component with a non-``Zero`` one.
    """

    __slots__ = ()

    def __class_getitem__(cls, params):
        w1, w2 = params
        return _lexicographic_weight(w1, w2)

    @classmethod
    def type_name(cls) -> str:
        return f"{cls.W1.type_name()}_LT_{cls.W2.type_name()}"

    @classmethod
    def properties(cls) -> WeightProperties:
        return (
            cls.W1.properties()
            & cls.W2.properties()
            & (
                WeightProperties.SEMIRING
                | WeightProperties.PATH
                | WeightProperties.IDEMPOTENT
                | WeightProperties.COMMUTATIVE
            )
        )

    @classmethod
    def reverse_type(cls):
        return LexicographicWeight[cls.W1.reverse_type(), cls.W2.reverse_type()]

    def member(self) -> bool:
        if not super().member():
            return False
        zero1 = self._value1 == self.W1.zero()
        zero2 = self._value2 == self.W2.zero()
        return zero1 == zero2

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if natural_less(self._value1, other._value1):
            return self
        if natural_less(other._value1, self._value1):
            return other
        if natural_less(self._value2, other._value2):
            return self
        if natural_less(other._value2, self._value2):
            return other
        return self

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return type(self)(
            self._value1.times(other._value1), self._value2.times(other._value2)
        )

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member():
            return self.no_weight()
        return type(self)(
            self._value1.divide(other._value1, divide_type),
            self._value2.divide(other._value2, divide_type),
        )
