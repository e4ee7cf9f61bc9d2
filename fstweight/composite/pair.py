import functools
from typing import BinaryIO, ClassVar, Type, TypeVar

from fstweight.weight.io import (
    NO_PARENTHESES,
    CompositeWeightReader,
    WeightIOConfig,
    WeightParseError,
    write_composite,
)
from fstweight.weight.ops import DELTA, DivideType, Weight, WeightProperties

P = TypeVar("P", bound="PairWeight")


def as_weight(weight_type: Type[Weight], value) -> Weight:
    """Returns ``value`` unchanged if it already has type ``weight_type``."""
    if type(value) is weight_type:
        return value
    return weight_type(value)


class PairWeight(Weight):
    """
    Base class of the weights made of two components of fixed types
    ``W1`` and ``W2``.

    :class:`PairWeight` supplies the structural part of the contract
    (identities built componentwise, membership, quantization, equality,
    text and binary I/O). Subclasses define the algebra.
    """

    __slots__ = ("_value1", "_value2")

    W1: ClassVar[Type[Weight]]
    W2: ClassVar[Type[Weight]]

    def __init__(self, value1, value2=None):
        if value2 is None:
            if not isinstance(value1, PairWeight):
                raise TypeError(
                    f"{type(self).__name__} requires two components or a pair weight, "
                    f"got {value1!r}."
                )
            value1, value2 = value1._value1, value1._value2
        self._value1 = as_weight(self.W1, value1)
        self._value2 = as_weight(self.W2, value2)

    @property
    def value1(self):
        return self._value1

    @property
    def value2(self):
        return self._value2

    @classmethod
    def zero(cls: Type[P]) -> P:
        return cls(cls.W1.zero(), cls.W2.zero())

    @classmethod
    def one(cls: Type[P]) -> P:
        return cls(cls.W1.one(), cls.W2.one())

    @classmethod
    def no_weight(cls: Type[P]) -> P:
        return cls(cls.W1.no_weight(), cls.W2.no_weight())

    def member(self) -> bool:
        return self._value1.member() and self._value2.member()

    def quantize(self: P, delta: float = DELTA) -> P:
        return type(self)(self._value1.quantize(delta), self._value2.quantize(delta))

    def reverse(self):
        return self.reverse_type()(self._value1.reverse(), self._value2.reverse())

    def approx_equal(self: P, other: P, delta: float = DELTA) -> bool:
        return self._value1.approx_equal(
            other._value1, delta
        ) and self._value2.approx_equal(other._value2, delta)

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        return write_composite(
            [self._value1.to_string(config), self._value2.to_string(config)], config
        )

    @classmethod
    def parse(cls: Type[P], text: str, config: WeightIOConfig = NO_PARENTHESES) -> P:
        reader = CompositeWeightReader(text, config)
        reader.read_begin()
        value1, more = reader.read_element(lambda t: cls.W1.parse(t, config))
        if not more:
            raise WeightParseError(
                f"Missing second component in {cls.type_name()} weight {text!r}"
            )
        value2, _ = reader.read_element(lambda t: cls.W2.parse(t, config), last=True)
        reader.read_end()
        return cls(value1, value2)

    def write(self, stream: BinaryIO) -> None:
        self._value1.write(stream)
        self._value2.write(stream)

    @classmethod
    def _read(cls: Type[P], stream: BinaryIO) -> P:
        value1 = cls.W1._read(stream)
        return cls(value1, cls.W2._read(stream))

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value1 == other._value1 and self._value2 == other._value2

    def __hash__(self) -> int:
        return hash((self._value1, self._value2))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value1!r}, {self._value2!r})"


@functools.lru_cache(maxsize=None)
def _product_weight(w1: Type[Weight], w2: Type[Weight]) -> Type["ProductWeight"]:
    return type(
        f"ProductWeight[{w1.__name__}, {w2.__name__}]",
        (ProductWeight,),
        {"__slots__": (), "W1": w1, "W2": w2},
    )


class ProductWeight(PairWeight):
    """
    The product semiring of ``W1`` and ``W2``: every operation is applied
    componentwise. ``ProductWeight[W1, W2]`` returns the specialized class,
    the same one every time for the same component types::

        >>> ProductWeight[TropicalWeight, LogWeight] is ProductWeight[TropicalWeight, LogWeight]
        True
        >>> ProductWeight[TropicalWeight, LogWeight].type_name()
        'tropical_X_log'
    """

    __slots__ = ()

    def __class_getitem__(cls, params):
        w1, w2 = params
        return _product_weight(w1, w2)

    @classmethod
    def type_name(cls) -> str:
        return f"{cls.W1.type_name()}_X_{cls.W2.type_name()}"

    @classmethod
    def properties(cls) -> WeightProperties:
        return (
            cls.W1.properties()
            & cls.W2.properties()
            & (
                WeightProperties.SEMIRING
                | WeightProperties.COMMUTATIVE
                | WeightProperties.IDEMPOTENT
            )
        )

    @classmethod
    def reverse_type(cls):
        return ProductWeight[cls.W1.reverse_type(), cls.W2.reverse_type()]

    def plus(self, other):
        return type(self)(
            self._value1.plus(other._value1), self._value2.plus(other._value2)
        )

    def times(self, other):
        return type(self)(
            self._value1.times(other._value1), self._value2.times(other._value2)
        )

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        return type(self)(
            self._value1.divide(other._value1, divide_type),
            self._value2.divide(other._value2, divide_type),
        )
