import math
import numbers
from typing import BinaryIO, ClassVar, Type, TypeVar, Union

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
    WeightIOConfig,
    WeightParseError,
    read_struct,
    write_struct,
)
from fstweight.weight.ops import (
    DELTA,
    DivideType,
    Weight,
    WeightProperties,
    minus,
    power,
)

F = TypeVar("F", bound="FloatWeightTpl")


class FloatWeightTpl(Weight):
    """
    Base class of the scalar weights whose value is a single float.

    Concrete families subclass this once per precision, e.g.
    :class:`TropicalWeight` (32-bit, ``"tropical"``) and
    :class:`TropicalWeight64` (64-bit, ``"tropical64"``). The two are distinct
    types: neither can be constructed from, nor compares equal to, the other.
    Use :func:`~fstweight.convert.convert` to change precision.

    A float weight can be built from and compared against a bare number,
    which is first rounded to the weight's precision::

        >>> TropicalWeight(2.0) == 2.0
        True
        >>> 2.0 == TropicalWeight(2.0)
        True
    """

    __slots__ = ("_value",)

    precision: ClassVar[FloatPrecision] = FLOAT32
    family: ClassVar[str]

    def __init__(self, value: Union[numbers.Real, "FloatWeightTpl"]):
        if isinstance(value, FloatWeightTpl):
            if type(value) is not type(self):
                raise TypeError(
                    f"Cannot construct {self.type_name()} weight from "
                    f"{value.type_name()} weight; use convert() instead."
                )
            value = value._value
        self._value = self.precision.round(float(value))

    @property
    def value(self) -> float:
        return self._value

    def __float__(self) -> float:
        return self._value

    @classmethod
    def type_name(cls) -> str:
        return cls.family + cls.precision.suffix

    @classmethod
    def no_weight(cls: Type[F]) -> F:
        return cls(math.nan)

    def member(self) -> bool:
        return not math.isnan(self._value) and self._value != -math.inf

    def quantize(self: F, delta: float = DELTA) -> F:
        if math.isinf(self._value) or math.isnan(self._value):
            return self
        return type(self)(math.floor(self._value / delta + 0.5) * delta)

    def approx_equal(self: F, other: F, delta: float = DELTA) -> bool:
        return (
            self._value <= other._value + delta and other._value <= self._value + delta
        )

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        return self.precision.format(self._value)

    @classmethod
    def parse(cls: Type[F], text: str, config: WeightIOConfig = NO_PARENTHESES) -> F:
        try:
            return cls(parse_float(text))
        except ValueError:
            raise WeightParseError(f"Bad {cls.type_name()} weight {text!r}") from None

    def write(self, stream: BinaryIO) -> None:
        write_struct(stream, self.precision.struct_format, self._value)

    @classmethod
    def _read(cls: Type[F], stream: BinaryIO) -> F:
        (value,) = read_struct(stream, cls.precision.struct_format)
        return cls(value)

    def __eq__(self, other) -> bool:
        if isinstance(other, numbers.Real) and not isinstance(other, Weight):
            return self._value == self.precision.round(float(other))
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def _coerce(self, other):
        if isinstance(other, numbers.Real) and not isinstance(other, Weight):
            return type(self)(other)
        return super()._coerce(other)


def _log_times(w1: F, w2: F) -> F:
    if not w1.member() or not w2.member():
        return w1.no_weight()
    f1, f2 = w1.value, w2.value
    if f1 == math.inf:
        return w1
    if f2 == math.inf:
        return w2
    return type(w1)(f1 + f2)


def _log_divide(w1: F, w2: F) -> F:
    if not w1.member() or not w2.member():
        return w1.no_weight()
    f1, f2 = w1.value, w2.value
    if f2 == math.inf:
        return w1.no_weight()
    if f1 == math.inf:
        return w1.zero()
    return type(w1)(f1 - f2)


class TropicalWeightTpl(FloatWeightTpl):
    """
    The tropical semiring ``(min, +, inf, 0)`` over negative log
    probabilities, used for shortest path computations.
    """

    __slots__ = ()

    family = "tropical"

    @classmethod
    def zero(cls):
        return cls(math.inf)

    @classmethod
    def one(cls):
        return cls(0.0)

    @classmethod
    def properties(cls) -> WeightProperties:
        return (
            WeightProperties.SEMIRING
            | WeightProperties.COMMUTATIVE
            | WeightProperties.IDEMPOTENT
            | WeightProperties.PATH
        )

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self if self._value <= other._value else other

    def times(self, other):
        return _log_times(self, other)

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        return _log_divide(self, other)


class LogWeightTpl(FloatWeightTpl):
    """
    The log semiring ``(-log(e^-a + e^-b), +, inf, 0)``: probabilities
    summed in negative log space.
    """

    __slots__ = ()

    family = "log"

    @classmethod
    def zero(cls):
        return cls(math.inf)

    @classmethod
    def one(cls):
        return cls(0.0)

    @classmethod
    def properties(cls) -> WeightProperties:
        return WeightProperties.SEMIRING | WeightProperties.COMMUTATIVE

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        f1, f2 = self._value, other._value
        if f1 == math.inf:
            return other
        if f2 == math.inf:
            return self
        if f1 > f2:
            return type(self)(f2 - log_pos_exp(f1 - f2))
        return type(self)(f1 - log_pos_exp(f2 - f1))

    def times(self, other):
        return _log_times(self, other)

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        return _log_divide(self, other)


class RealWeightTpl(FloatWeightTpl):
    """
    The real semiring ``(+, *, 0, 1)`` over finite values, used for direct
    probability products.
    """

    __slots__ = ()

    family = "real"

    @classmethod
    def zero(cls):
        return cls(0.0)

    @classmethod
    def one(cls):
        return cls(1.0)

    @classmethod
    def properties(cls) -> WeightProperties:
        return WeightProperties.SEMIRING | WeightProperties.COMMUTATIVE

    def member(self) -> bool:
        return math.isfinite(self._value)

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return type(self)(self._value + other._value)

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return type(self)(self._value * other._value)

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member() or other._value == 0.0:
            return self.no_weight()
        return type(self)(self._value / other._value)


class MinMaxWeightTpl(FloatWeightTpl):
    """
    The min-max semiring ``(min, max, inf, -inf)`` used for bottleneck paths.
    """

    __slots__ = ()

    family = "minmax"

    @classmethod
    def zero(cls):
        return cls(math.inf)

    @classmethod
    def one(cls):
        return cls(-math.inf)

    @classmethod
    def properties(cls) -> WeightProperties:
        return (
            WeightProperties.SEMIRING
            | WeightProperties.COMMUTATIVE
            | WeightProperties.IDEMPOTENT
            | WeightProperties.PATH
        )

    def member(self) -> bool:
        return not math.isnan(self._value)

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self if self._value <= other._value else other

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self if self._value >= other._value else other

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member():
            return self.no_weight()
        if self._value >= other._value:
            return self
        return self.no_weight()


class TropicalWeight(TropicalWeightTpl):
    __slots__ = ()
    precision = FLOAT32


class TropicalWeight64(TropicalWeightTpl):
    __slots__ = ()
    precision = FLOAT64


class LogWeight(LogWeightTpl):
    __slots__ = ()
    precision = FLOAT32


class LogWeight64(LogWeightTpl):
    __slots__ = ()
    precision = FLOAT64


class RealWeight(RealWeightTpl):
    __slots__ = ()
    precision = FLOAT32


class RealWeight64(RealWeightTpl):
    __slots__ = ()
    precision = FLOAT64


class MinMaxWeight(MinMaxWeightTpl):
    __slots__ = ()
    precision = FLOAT32


class MinMaxWeight64(MinMaxWeightTpl):
    __slots__ = ()
    precision = FLOAT64


@power.register(TropicalWeightTpl)
@power.register(LogWeightTpl)
def _power_log(weight: F, n: int) -> F:
    if n < 0:
        raise ValueError(f"power requires a non-negative exponent, got {n}.")
    if n == 0:
        return weight.one()
    if not weight.member():
        return weight.no_weight()
    if weight.value == math.inf:
        return weight
    return type(weight)(weight.value * n)


@power.register
def _power_minmax(weight: MinMaxWeightTpl, n: int) -> MinMaxWeightTpl:
    if n < 0:
        raise ValueError(f"power requires a non-negative exponent, got {n}.")
    if n == 0:
        return weight.one()
    return weight


@minus.register
def _minus_log(w1: LogWeightTpl, w2: LogWeightTpl) -> LogWeightTpl:
    # defined only when the result is still a probability, i.e. w1 >= w2 in
    # the real semiring
    if not w1.member() or not w2.member():
        return w1.no_weight()
    f1, f2 = w1.value, w2.value
    if f1 > f2:
        return w1.no_weight()
    if f2 == math.inf:
        return w1
    d = f2 - f1
    if d == 0:
        return w1.zero()
    return type(w1)(f1 - log_neg_exp(d))
