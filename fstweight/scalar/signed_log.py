import math
import numbers
from typing import BinaryIO, ClassVar, Optional, Type, TypeVar, Union

from fstweight.scalar.precision import (
    FLOAT32,
    FLOAT64,
    FloatPrecision,
    log_neg_exp,
    log_pos_exp,
    parse_float,
)
from fstweight.weight.io import (
    NO_PARENTHESES,
    CompositeWeightReader,
    WeightIOConfig,
    WeightParseError,
    read_struct,
    write_composite,
    write_struct,
)
from fstweight.weight.ops import DELTA, DivideType, Weight, WeightProperties, minus

S = TypeVar("S", bound="SignedLogWeightTpl")


class SignedLogWeightTpl(Weight):
    """
    The log semiring extended with a sign, so that every weight has an
    additive inverse and :func:`~fstweight.weight.ops.minus` is total.

    A value is a pair of a sign and a magnitude ``f`` in negative log space,
    representing ``sign * exp(-f)``. Zero has a positive sign by convention,
    which keeps exact equality structural.

        >>> one = SignedLogWeight.one()
        >>> minus(one, one) == SignedLogWeight.zero()
        True
    """

    __slots__ = ("_positive", "_value")

    precision: ClassVar[FloatPrecision] = FLOAT32

    def __init__(
        self,
        sign_or_value: Union[numbers.Real, "SignedLogWeightTpl"],
        value: Optional[numbers.Real] = None,
    ):
        if isinstance(sign_or_value, SignedLogWeightTpl):
            if type(sign_or_value) is not type(self):
                raise TypeError(
                    f"Cannot construct {self.type_name()} weight from "
                    f"{sign_or_value.type_name()} weight; use convert() instead."
                )
            positive, magnitude = sign_or_value._positive, sign_or_value._value
        elif value is None:
            positive, magnitude = True, float(sign_or_value)
        else:
            positive, magnitude = sign_or_value > 0, float(value)
        magnitude = self.precision.round(magnitude)
        self._positive = bool(positive) or magnitude == math.inf
        self._value = magnitude

    @property
    def positive(self) -> bool:
        return self._positive

    @property
    def value(self) -> float:
        return self._value

    @classmethod
    def zero(cls: Type[S]) -> S:
        return cls(1, math.inf)

    @classmethod
    def one(cls: Type[S]) -> S:
        return cls(1, 0.0)

    @classmethod
    def no_weight(cls: Type[S]) -> S:
        return cls(1, math.nan)

    @classmethod
    def type_name(cls) -> str:
        return "signed_log" + cls.precision.suffix

    @classmethod
    def properties(cls) -> WeightProperties:
        return WeightProperties.SEMIRING | WeightProperties.COMMUTATIVE

    def member(self) -> bool:
        return not math.isnan(self._value) and self._value != -math.inf

    def __neg__(self: S) -> S:
        return type(self)(-1 if self._positive else 1, self._value)

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        f1, f2 = self._value, other._value
        if f1 == math.inf:
            return other
        if f2 == math.inf:
            return self
        if self._positive == other._positive:
            if f1 > f2:
                return type(self)(self.sign, f2 - log_pos_exp(f1 - f2))
            return type(self)(self.sign, f1 - log_pos_exp(f2 - f1))
        if f1 == f2:
            return self.zero()
        if f1 < f2:
            return type(self)(self.sign, f1 - log_neg_exp(f2 - f1))
        return type(self)(other.sign, f2 - log_neg_exp(f1 - f2))

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        sign = 1 if self._positive == other._positive else -1
        f1, f2 = self._value, other._value
        if f1 == math.inf or f2 == math.inf:
            return self.zero()
        return type(self)(sign, f1 + f2)

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member():
            return self.no_weight()
        f1, f2 = self._value, other._value
        if f2 == math.inf:
            return self.no_weight()
        if f1 == math.inf:
            return self.zero()
        sign = 1 if self._positive == other._positive else -1
        return type(self)(sign, f1 - f2)

    @property
    def sign(self) -> int:
        return 1 if self._positive else -1

    def quantize(self: S, delta: float = DELTA) -> S:
        if math.isinf(self._value) or math.isnan(self._value):
            return self
        return type(self)(self.sign, math.floor(self._value / delta + 0.5) * delta)

    def approx_equal(self: S, other: S, delta: float = DELTA) -> bool:
        if self._positive != other._positive:
            return False
        return (
            self._value <= other._value + delta and other._value <= self._value + delta
        )

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        return write_composite(
            [self.precision.format(float(self.sign)), self.precision.format(self._value)],
            config,
        )

    @classmethod
    def parse(cls: Type[S], text: str, config: WeightIOConfig = NO_PARENTHESES) -> S:
        reader = CompositeWeightReader(text, config)
        reader.read_begin()
        sign, more = reader.read_element(cls._parse_float)
        if not more:
            raise WeightParseError(f"Missing magnitude in {cls.type_name()} weight {text!r}")
        value, _ = reader.read_element(cls._parse_float, last=True)
        reader.read_end()
        return cls(1 if sign > 0 else -1, value)

    @classmethod
    def _parse_float(cls, text: str) -> float:
        try:
            return parse_float(text)
        except ValueError:
            raise WeightParseError(f"Bad {cls.type_name()} component {text!r}") from None

    def write(self, stream: BinaryIO) -> None:
        fmt = "<" + 2 * self.precision.struct_format[1:]
        write_struct(stream, fmt, float(self.sign), self._value)

    @classmethod
    def _read(cls: Type[S], stream: BinaryIO) -> S:
        fmt = "<" + 2 * cls.precision.struct_format[1:]
        sign, value = read_struct(stream, fmt)
        return cls(1 if sign > 0 else -1, value)

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._positive == other._positive and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._positive, self._value))

    def _coerce(self, other):
        if isinstance(other, numbers.Real) and not isinstance(other, Weight):
            return type(self)(other)
        return super()._coerce(other)


class SignedLogWeight(SignedLogWeightTpl):
    __slots__ = ()
    precision = FLOAT32


class SignedLogWeight64(SignedLogWeightTpl):
    __slots__ = ()
    precision = FLOAT64


@minus.register
def _minus_signed_log(w1: SignedLogWeightTpl, w2: SignedLogWeightTpl) -> SignedLogWeightTpl:
    return w1.plus(-w2)
