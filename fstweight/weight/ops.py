import abc
import enum
import functools
import io
import logging
import numbers
from typing import BinaryIO, Type, TypeVar, Union

from fstweight.weight.io import NO_PARENTHESES, WeightIOConfig, WeightParseError

W = TypeVar("W", bound="Weight")

logger = logging.getLogger(__name__)

DELTA = 1.0 / 1024.0


class WeightProperties(enum.IntFlag):
    """
    Capability descriptor attached to every weight type.

    Generic code, most notably :class:`~fstweight.testing.tester.WeightTester`,
    inspects these flags to decide which algebraic laws apply to a type rather
    than special-casing concrete types. Composite types compute their flags by
    masking the flags of their components::

        >>> props = ProductWeight[TropicalWeight, LogWeight].properties()
        >>> props == WeightProperties.SEMIRING | WeightProperties.COMMUTATIVE
        True
    """

    NONE = 0
    #: ``Times`` distributes over ``Plus`` from the left.
    LEFT_SEMIRING = 1
    #: ``Times`` distributes over ``Plus`` from the right.
    RIGHT_SEMIRING = 2
    SEMIRING = LEFT_SEMIRING | RIGHT_SEMIRING
    #: ``Times`` is commutative.
    COMMUTATIVE = 4
    #: ``Plus(a, a) == a``, which makes :func:`natural_less` well defined.
    IDEMPOTENT = 8
    #: ``Plus(a, b)`` is always either ``a`` or ``b``.
    PATH = 16


class DivideType(enum.Enum):
    """Side from which :func:`divide` inverts ``Times``."""

    LEFT = "left"
    RIGHT = "right"
    ANY = "any"


class Weight(abc.ABC):
    """
    Abstract base class of all semiring weights.

    A :class:`Weight` is an immutable value of a particular semiring type.
    Every concrete type provides its identities :meth:`zero` and :meth:`one`,
    the binary operations :meth:`plus` and :meth:`times`, a
    :meth:`member` predicate and a non-member sentinel :meth:`no_weight`,
    quantization, reversal, exact and approximate equality, a hash consistent
    with exact equality, and text and binary serialization.

    Weights never raise on invalid values: an operation with a non-member
    operand, a restricted operation on incompatible operands, or malformed
    input text all produce a value for which :meth:`member` is ``False``.

    The operators ``+`` and ``*`` are aliases for :meth:`plus` and
    :meth:`times`::

        >>> TropicalWeight(2) + TropicalWeight(3) == TropicalWeight(2)
        True
        >>> TropicalWeight(2) * TropicalWeight(3) == TropicalWeight(5)
        True
    """

    __slots__ = ()

    @classmethod
    @abc.abstractmethod
    def zero(cls: Type[W]) -> W:
        """The identity of ``Plus`` and annihilator of ``Times``."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def one(cls: Type[W]) -> W:
        """The identity of ``Times``."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def no_weight(cls: Type[W]) -> W:
        """A sentinel value that is not a member of the semiring."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def type_name(cls) -> str:
        """A stable identifier, distinct for every concrete weight type."""
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def properties(cls) -> WeightProperties:
        raise NotImplementedError

    @classmethod
    def reverse_type(cls) -> Type["Weight"]:
        """The type of the values returned by :meth:`reverse`."""
        return cls

    @abc.abstractmethod
    def plus(self: W, other: W) -> W:
        raise NotImplementedError

    @abc.abstractmethod
    def times(self: W, other: W) -> W:
        raise NotImplementedError

    def divide(self: W, other: W, divide_type: DivideType = DivideType.ANY) -> W:
        """
        Inverts :meth:`times`. Types that are not divisible, or not divisible
        from the requested side, return :meth:`no_weight`.
        """
        return self.no_weight()

    @abc.abstractmethod
    def member(self) -> bool:
        raise NotImplementedError

    def quantize(self: W, delta: float = DELTA) -> W:
        return self

    def reverse(self) -> "Weight":
        return self

    @abc.abstractmethod
    def approx_equal(self: W, other: W, delta: float = DELTA) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def parse(cls: Type[W], text: str, config: WeightIOConfig = NO_PARENTHESES) -> W:
        """
        Parses the text form of a weight, raising
        :class:`~fstweight.weight.io.WeightParseError` on malformed input.
        Composite weights call the ``parse`` of their components so that an
        error anywhere in the text surfaces at the outermost call.
        """
        raise NotImplementedError

    @classmethod
    def from_string(
        cls: Type[W], text: str, config: WeightIOConfig = NO_PARENTHESES
    ) -> W:
        """
        Parses the text form of a weight, returning :meth:`no_weight`
        on malformed input.

        :param text: Text previously produced by :meth:`to_string`.
        :param config: The delimiter configuration the text was written with.
        """
        try:
            return cls.parse(text, config)
        except WeightParseError as e:
            logger.warning("Failed to parse %s weight: %s", cls.type_name(), e)
            return cls.no_weight()

    @abc.abstractmethod
    def write(self, stream: BinaryIO) -> None:
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def _read(cls: Type[W], stream: BinaryIO) -> W:
        raise NotImplementedError

    @classmethod
    def read(cls: Type[W], stream: BinaryIO) -> W:
        """
        Reads a weight written by :meth:`write`, returning :meth:`no_weight`
        if the stream is truncated or corrupt.
        """
        try:
            return cls._read(stream)
        except WeightParseError as e:
            logger.warning("Failed to read %s weight: %s", cls.type_name(), e)
            return cls.no_weight()

    def to_bytes(self) -> bytes:
        stream = io.BytesIO()
        self.write(stream)
        return stream.getvalue()

    @classmethod
    def from_bytes(cls: Type[W], data: bytes) -> W:
        return cls.read(io.BytesIO(data))

    @abc.abstractmethod
    def __eq__(self, other) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def __hash__(self) -> int:
        raise NotImplementedError

    def _coerce(self, other):
        if type(other) is type(self):
            return other
        return NotImplemented

    def __add__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self.plus(other)

    def __radd__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other.plus(self)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self.times(other)

    def __rmul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other.times(self)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_string()!r})"


Operand = Union[Weight, numbers.Real]


def plus(w1: Operand, w2: Operand) -> Weight:
    """
    Semiring addition. Either operand may be a bare number when the other is
    a scalar weight, in which case the number is converted to that type::

        >>> plus(TropicalWeight.zero(), 3.0) == TropicalWeight(3.0)
        True
    """
    return w1 + w2


def times(w1: Operand, w2: Operand) -> Weight:
    """
    Semiring multiplication. Either operand may be a bare number when the
    other is a scalar weight. A power or sparse power weight may also be
    multiplied on either side by a weight of its component type, which
    scales every component.
    """
    return w1 * w2


def divide(w1: W, w2: W, divide_type: DivideType = DivideType.ANY) -> W:
    """
    Semiring division: the ``d`` with ``Times(w2, d) == w1`` (left division)
    or ``Times(d, w2) == w1`` (right division).

    :param w1: The dividend.
    :param w2: The divisor.
    :param divide_type: The side to divide from. Commutative types accept
        any side; non-commutative types only the side they distribute from.
    :return: The quotient, or the non-member sentinel when undefined.
    """
    return w1.divide(w2, divide_type)


@functools.singledispatch
def minus(w1: Weight, w2: Weight) -> Weight:
    """
    Semiring subtraction, defined only for types with additive inverses
    (:class:`SignedLogWeight`) or a partial difference (:class:`LogWeight`,
    where the result must stay a probability).

    .. note::

        :func:`minus` can be extended to new weight types by registering
        an implementation for the type using :func:`functools.singledispatch` .
    """
    raise NotImplementedError(f"minus not implemented for type {type(w1)}.")


@functools.singledispatch
def power(weight: W, n: int) -> W:
    """
    Computes ``Times`` of ``n`` copies of ``weight``, or ``One`` for ``n == 0``.
    Types with a closed form register a faster implementation.
    """
    if n < 0:
        raise ValueError(f"power requires a non-negative exponent, got {n}.")
    result = type(weight).one()
    for _ in range(n):
        result = result.times(weight)
    return result


def approx_equal(w1: W, w2: W, delta: float = DELTA) -> bool:
    """
    Approximate equality within ``delta``. For floating weights this is
    ``|w1 - w2| <= delta`` on the stored value; composite weights require
    every component to be approximately equal.
    """
    return w1.approx_equal(w2, delta)


def quantize(weight: W, delta: float = DELTA) -> W:
    return weight.quantize(delta)


def natural_less(w1: W, w2: W) -> bool:
    """
    The natural order of an idempotent semiring: ``w1 < w2`` iff
    ``Plus(w1, w2) == w1`` and ``w1 != w2``. The relation is a strict weak
    ordering for path semirings and a strict partial order otherwise.

    :raises TypeError: if the weight type is not idempotent.
    """
    if not type(w1).properties() & WeightProperties.IDEMPOTENT:
        raise TypeError(
            f"natural_less requires an idempotent weight type, got {type(w1).type_name()}."
        )
    return w1.plus(w2) == w1 and w1 != w2
