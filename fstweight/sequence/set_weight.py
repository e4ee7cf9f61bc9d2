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

S = TypeVar("S", bound="SetWeightTpl")

#: Label of the single-label set that represents the universal set.
SET_UNIVERSAL = -1
#: Label of the single-label set that represents the non-member sentinel.
SET_BAD = -2
SET_SEPARATOR = "_"

_UNIVERSAL = (SET_UNIVERSAL,)
_BAD = (SET_BAD,)


class SetType(enum.Enum):
    INTERSECT_UNION = "intersect_union"
    UNION_INTERSECT = "union_intersect"
    RESTRICT = "restricted_set_intersect_union"
    BOOLEAN = "boolean_set"


class SetWeightTpl(Weight):
    """
    Finite sets of positive integer labels, plus a distinguished universal
    set.

    The variants pick which of intersection and union is ``Plus``:

    ===============================  =========  =========  =========  =========
    Variant                          Plus       Times      Zero       One
    ===============================  =========  =========  =========  =========
    :class:`IntersectUnionSetWeight`  ∩          ∪          universal  ∅
    :class:`UnionIntersectSetWeight`  ∪          ∩          ∅          universal
    :class:`RestrictedSetWeight`      ∩ (equal)  ∪          universal  ∅
    :class:`BooleanSetWeight`         ∪          ∩          ∅          universal
    ===============================  =========  =========  =========  =========

    A set weight can be built from a set weight of any other variant, which
    copies the underlying set unchanged.
    """

    __slots__ = ("_labels",)

    set_type: ClassVar[SetType]

    def __init__(self, labels: Iterable[int] = ()):
        if isinstance(labels, SetWeightTpl):
            labels = labels._labels
        labels = tuple(sorted(set(int(label) for label in labels)))
        if labels not in (_UNIVERSAL, _BAD) and any(label <= 0 for label in labels):
            raise ValueError(f"Set labels must be positive, got {labels}.")
        self._labels: Tuple[int, ...] = labels

    @property
    def labels(self) -> Tuple[int, ...]:
        return self._labels

    def __iter__(self) -> Iterator[int]:
        return iter(self._labels)

    def size(self) -> int:
        return len(self._labels)

    @classmethod
    def empty(cls: Type[S]) -> S:
        return cls(())

    @classmethod
    def universal(cls: Type[S]) -> S:
        return cls(_UNIVERSAL)

    @classmethod
    def no_weight(cls: Type[S]) -> S:
        return cls(_BAD)

    @classmethod
    def type_name(cls) -> str:
        return cls.set_type.value

    @classmethod
    def properties(cls) -> WeightProperties:
        return (
            WeightProperties.SEMIRING
            | WeightProperties.COMMUTATIVE
            | WeightProperties.IDEMPOTENT
        )

    def is_universal(self) -> bool:
        return self._labels == _UNIVERSAL

    def member(self) -> bool:
        return self._labels != _BAD

    def _union(self, other):
        if self.is_universal():
            return self
        if other.is_universal():
            return type(self)(other)
        return type(self)(self._labels + other._labels)

    def _intersect(self, other):
        if self.is_universal():
            return type(self)(other)
        if other.is_universal():
            return self
        return type(self)(set(self._labels).intersection(other._labels))

    def approx_equal(self: S, other: S, delta: float = DELTA) -> bool:
        return self == other

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        if self.is_universal():
            return "UnivSet"
        if not self.member():
            return "BadSet"
        if not self._labels:
            return "EmptySet"
        return SET_SEPARATOR.join(str(label) for label in self._labels)

    @classmethod
    def parse(cls: Type[S], text: str, config: WeightIOConfig = NO_PARENTHESES) -> S:
        text = text.strip()
        if text == "UnivSet":
            return cls.universal()
        if text == "EmptySet":
            return cls.empty()
        if text == "BadSet":
            return cls.no_weight()
        try:
            labels = [int(label) for label in text.split(SET_SEPARATOR)]
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
        if labels not in (_UNIVERSAL, _BAD) and any(label <= 0 for label in labels):
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


class _IntersectUnionTpl(SetWeightTpl):
    __slots__ = ()

    @classmethod
    def zero(cls):
        return cls.universal()

    @classmethod
    def one(cls):
        return cls.empty()

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self._union(other)

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        # set difference: the smallest d with other | d == self | other
        if not self.member() or not other.member() or other.is_universal():
            return self.no_weight()
        if self.is_universal():
            return self
        return type(self)(set(self._labels).difference(other._labels))


class IntersectUnionSetWeight(_IntersectUnionTpl):
    __slots__ = ()
    set_type = SetType.INTERSECT_UNION

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self._intersect(other)


class RestrictedSetWeight(_IntersectUnionTpl):
    __slots__ = ()
    set_type = SetType.RESTRICT

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_universal():
            return other
        if other.is_universal() or self == other:
            return self
        return self.no_weight()


class _UnionIntersectTpl(SetWeightTpl):
    __slots__ = ()

    @classmethod
    def zero(cls):
        return cls.empty()

    @classmethod
    def one(cls):
        return cls.universal()

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self._union(other)

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        return self._intersect(other)

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        if not self.member() or not other.member() or not other._labels:
            return self.no_weight()
        return self


class UnionIntersectSetWeight(_UnionIntersectTpl):
    __slots__ = ()
    set_type = SetType.UNION_INTERSECT


class BooleanSetWeight(_UnionIntersectTpl):
    """
    Sets as boolean vectors: ``Plus`` is a bitwise OR and ``Times`` a
    bitwise AND over label membership.
    """

    __slots__ = ()
    set_type = SetType.BOOLEAN
