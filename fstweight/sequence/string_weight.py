import enum
from typing import BinaryIO, ClassVar, Iterable, Iterator, Tuple, Type, TypeVar

from fstweight.weight.io import (
    NO_PARENTHESES,
    WeightIOConfig,
    WeightParseError,
    read_struct,
    write_struct,
)
from fstweight.weight.ops import DELTA, DivideType, Weight, WeightProperties

S = TypeVar("S", bound="StringWeightTpl")

#: Label of the single-label string that represents ``Zero``.
STRING_INFINITY = -1
#: Label of the single-label string that represents the non-member sentinel.
STRING_BAD = -2
STRING_SEPARATOR = "_"

_SPECIAL_STRINGS = ((STRING_INFINITY,), (STRING_BAD,))


class StringType(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    RESTRICT = "restricted"


class StringWeightTpl(Weight):
    """
    Strings of positive integer labels under concatenation.

    ``Times`` concatenates and ``One`` is the empty string. ``Zero`` is a
    distinguished infinite string that absorbs concatenation. The variants
    differ in ``Plus``:

    - :class:`LeftStringWeight`: the longest common prefix (a left semiring),
    - :class:`RightStringWeight`: the longest common suffix (a right semiring),
    - :class:`RestrictedStringWeight`: only defined on equal strings; unequal
      arguments give the non-member sentinel.

    Reversing a left string gives a right string and vice versa.
    """

    __slots__ = ("_labels",)

    string_type: ClassVar[StringType]

    def __init__(self, labels: Iterable[int] = ()):
        if isinstance(labels, StringWeightTpl):
            labels = labels._labels
        self._labels: Tuple[int, ...] = tuple(int(label) for label in labels)
        if self._labels not in _SPECIAL_STRINGS and any(label <= 0 for label in self._labels):
            raise ValueError(f"String labels must be positive, got {self._labels}.")

    @property
    def labels(self) -> Tuple[int, ...]:
        return self._labels

    def __iter__(self) -> Iterator[int]:
        return iter(self._labels)

    def size(self) -> int:
        return len(self._labels)

    @classmethod
    def zero(cls: Type[S]) -> S:
        return cls((STRING_INFINITY,))

    @classmethod
    def one(cls: Type[S]) -> S:
        return cls(())

    @classmethod
    def no_weight(cls: Type[S]) -> S:
        return cls((STRING_BAD,))

    @classmethod
    def type_name(cls) -> str:
        return f"{cls.string_type.value}_string"

    def is_zero(self) -> bool:
        return self._labels == (STRING_INFINITY,)

    def member(self) -> bool:
        return self._labels != (STRING_BAD,)

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_zero() or other.is_zero():
            return self.zero()
        return type(self)(self._labels + other._labels)

    def _divide_left(self, other):
        if other.is_zero():
            return self.no_weight()
        if self.is_zero():
            return self
        n = other.size()
        if self._labels[:n] != other._labels:
            return self.no_weight()
        return type(self)(self._labels[n:])

    def _divide_right(self, other):
        if other.is_zero():
            return self.no_weight()
        if self.is_zero():
            return self
        n = other.size()
        if n and self._labels[-n:] != other._labels:
            return self.no_weight()
        return type(self)(self._labels[: self.size() - n])

    def reverse(self):
        if self.is_zero() or not self.member():
            return self.reverse_type()(self._labels)
        return self.reverse_type()(reversed(self._labels))

    def approx_equal(self: S, other: S, delta: float = DELTA) -> bool:
        return self == other

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        if self.is_zero():
            return "Infinity"
        if not self.member():
            return "BadString"
        if not self._labels:
            return "Epsilon"
        return STRING_SEPARATOR.join(str(label) for label in self._labels)

    @classmethod
    def parse(cls: Type[S], text: str, config: WeightIOConfig = NO_PARENTHESES) -> S:
        text = text.strip()
        if text == "Infinity":
            return cls.zero()
        if text == "Epsilon":
            return cls.one()
        if text == "BadString":
            return cls.no_weight()
        try:
            labels = [int(label) for label in text.split(STRING_SEPARATOR)]
        except ValueError:
            raise WeightParseError(f"Bad {cls.type_name()} weight {text!r}") from None
        if any(label <= 0 for label in labels):
            raise WeightParseError(f"Labels of {text!r} must be positive")
        return cls(labels)

    def write(self, stream: BinaryIO) -> None:
        write_struct(stream, "<i", self.size())
        write_struct(stream, f"<{self.size()}i", *self._labels)

    @classmethod
    def _read(cls: Type[S], stream: BinaryIO) -> S:
        (size,) = read_struct(stream, "<i")
        if size < 0:
            raise WeightParseError(f"Negative {cls.type_name()} size {size}")
        labels = read_struct(stream, f"<{size}i")
        if labels not in _SPECIAL_STRINGS and any(label <= 0 for label in labels):
            raise WeightParseError(
                f"Labels of {cls.type_name()} must be positive, got {labels}"
            )
        return cls(labels)

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._labels == other._labels

    def __hash__(self) -> int:
        return hash(self._labels)


def _common_prefix(s1: Tuple[int, ...], s2: Tuple[int, ...]) -> Tuple[int, ...]:
    n = 0
    for l1, l2 in zip(s1, s2):
        if l1 != l2:
            break
        n += 1
    return s1[:n]


class LeftStringWeight(StringWeightTpl):
    __slots__ = ()
    string_type = StringType.LEFT

    @classmethod
    def properties(cls) -> WeightProperties:
        return WeightProperties.LEFT_SEMIRING | WeightProperties.IDEMPOTENT

    @classmethod
    def reverse_type(cls):
        return RightStringWeight

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_zero():
            return other
        if other.is_zero():
            return self
        return type(self)(_common_prefix(self._labels, other._labels))

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member():
            return self.no_weight()
        if divide_type != DivideType.LEFT:
            return self.no_weight()
        return self._divide_left(other)


class RightStringWeight(StringWeightTpl):
    __slots__ = ()
    string_type = StringType.RIGHT

    @classmethod
    def properties(cls) -> WeightProperties:
        return WeightProperties.RIGHT_SEMIRING | WeightProperties.IDEMPOTENT

    @classmethod
    def reverse_type(cls):
        return LeftStringWeight

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_zero():
            return other
        if other.is_zero():
            return self
        suffix = _common_prefix(self._labels[::-1], other._labels[::-1])
        return type(self)(suffix[::-1])

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member():
            return self.no_weight()
        if divide_type != DivideType.RIGHT:
            return self.no_weight()
        return self._divide_right(other)


class RestrictedStringWeight(StringWeightTpl):
    __slots__ = ()
    string_type = StringType.RESTRICT

    @classmethod
    def properties(cls) -> WeightProperties:
        return WeightProperties.SEMIRING | WeightProperties.IDEMPOTENT

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_zero():
            return other
        if other.is_zero() or self == other:
            return self
        return self.no_weight()

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member():
            return self.no_weight()
        if divide_type == DivideType.LEFT:
            return self._divide_left(other)
        if divide_type == DivideType.RIGHT:
            return self._divide_right(other)
        return self.no_weight()


def shortlex_less(s1: StringWeightTpl, s2: StringWeightTpl) -> bool:
    """
    Orders strings by length, then label by label. ``Zero`` sorts as a
    one-label string below every label.
    """
    if s1.size() != s2.size():
        return s1.size() < s2.size()
    for l1, l2 in zip(s1, s2):
        if l1 != l2:
            return l1 < l2
    return False
