import functools
from typing import (
    BinaryIO,
    Callable,
    ClassVar,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Type,
    TypeVar,
)

from fstweight.composite.pair import as_weight
from fstweight.weight.io import (
    NO_PARENTHESES,
    CompositeWeightReader,
    WeightIOConfig,
    WeightParseError,
    read_struct,
    write_composite,
    write_struct,
)
from fstweight.weight.ops import (
    DELTA,
    DivideType,
    Weight,
    WeightProperties,
    natural_less,
)

U = TypeVar("U", bound="UnionWeight")


def keep_first(w1: Weight, w2: Weight) -> Weight:
    return w1


class UnionWeightOptions(NamedTuple):
    """
    Ordering and merging policy of a :class:`UnionWeight`.

    :param compare: Strict ordering of the elements.
    :param merge: Combines two elements that compare equal, i.e. neither is
        ordered before the other.
    :param reverse: Options of the reversed union weight. ``None`` reuses
        these options.
    """

    compare: Callable[[Weight, Weight], bool] = natural_less
    merge: Callable[[Weight, Weight], Weight] = keep_first
    reverse: Optional["UnionWeightOptions"] = None


DEFAULT_UNION_OPTIONS = UnionWeightOptions()


@functools.lru_cache(maxsize=None)
def _union_weight(w: Type[Weight], options: UnionWeightOptions) -> Type["UnionWeight"]:
    return type(
        f"UnionWeight[{w.__name__}]",
        (UnionWeight,),
        {"__slots__": (), "W": w, "options": options},
    )


class UnionWeight(Weight):
    """
    A sorted collection of ``W`` weights.

    Elements are kept ordered by ``options.compare``; inserting an element
    that compares equal to one already present merges the two with
    ``options.merge``. ``Plus`` is the ordered union of the two collections
    and ``Times`` multiplies every pair of elements. ``Zero`` is the empty
    collection and ``One`` the singleton ``{W.one()}``.

    ``UnionWeight[W]`` uses :data:`DEFAULT_UNION_OPTIONS`, which orders by
    :func:`~fstweight.weight.ops.natural_less` and keeps the first of two
    equal elements; ``UnionWeight[W, options]`` selects other options.
    """

    __slots__ = ("_elements", "_member")

    W: ClassVar[Type[Weight]]
    options: ClassVar[UnionWeightOptions]

    def __class_getitem__(cls, params):
        if isinstance(params, tuple):
            w, options = params
        else:
            w, options = params, DEFAULT_UNION_OPTIONS
        return _union_weight(w, options)

    def __init__(self, elements: Iterable = ()):
        if isinstance(elements, UnionWeight):
            elements = elements._elements
        elif isinstance(elements, Weight):
            elements = [elements]
        self._elements: List[Weight] = []
        self._member = True
        for element in elements:
            self._insert(as_weight(self.W, element))

    def _insert(self, weight: Weight) -> None:
        # binary search for the first element not ordered before weight
        compare = self.options.compare
        elements = self._elements
        if not self._member or not weight.member():
            self._member = False
            elements.append(weight)
            return
        lo, hi = 0, len(elements)
        while lo < hi:
            mid = (lo + hi) // 2
            if compare(elements[mid], weight):
                lo = mid + 1
            else:
                hi = mid
        if lo < len(elements) and not compare(weight, elements[lo]):
            merged = self.options.merge(elements[lo], weight)
            self._member = merged.member()
            elements[lo] = merged
        else:
            elements.insert(lo, weight)

    def __iter__(self) -> Iterator[Weight]:
        return iter(self._elements)

    def size(self) -> int:
        return len(self._elements)

    @classmethod
    def zero(cls: Type[U]) -> U:
        return cls(())

    @classmethod
    def one(cls: Type[U]) -> U:
        return cls([cls.W.one()])

    @classmethod
    def no_weight(cls: Type[U]) -> U:
        return cls([cls.W.no_weight()])

    @classmethod
    def type_name(cls) -> str:
        return f"{cls.W.type_name()}_union"

    @classmethod
    def properties(cls) -> WeightProperties:
        return cls.W.properties() & (
            WeightProperties.SEMIRING
            | WeightProperties.COMMUTATIVE
            | WeightProperties.IDEMPOTENT
        )

    @classmethod
    def reverse_type(cls):
        return UnionWeight[cls.W.reverse_type(), cls.options.reverse or cls.options]

    def is_zero(self) -> bool:
        return not self._elements

    def member(self) -> bool:
        return self._member

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_zero():
            return other
        if other.is_zero():
            return self
        result = type(self)(self)
        for element in other._elements:
            result._insert(element)
        return result

    def times(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        if self.is_zero() or other.is_zero():
            return self.zero()
        result = self.zero()
        for e1 in self._elements:
            result = result.plus(type(self)(e1.times(e2) for e2 in other._elements))
        return result

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        # defined for singleton divisors only
        if not self.member() or not other.member() or other.is_zero():
            return self.no_weight()
        if self.is_zero():
            return self
        if other.size() != 1:
            return self.no_weight()
        (divisor,) = other._elements
        return type(self)(e.divide(divisor, divide_type) for e in self._elements)

    def quantize(self: U, delta: float = DELTA) -> U:
        return type(self)(e.quantize(delta) for e in self._elements)

    def reverse(self):
        return self.reverse_type()(e.reverse() for e in self._elements)

    def approx_equal(self: U, other: U, delta: float = DELTA) -> bool:
        if self.size() != other.size():
            return False
        return all(
            e1.approx_equal(e2, delta)
            for e1, e2 in zip(self._elements, other._elements)
        )

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        if self.is_zero():
            return "EmptySet"
        if not self.member():
            return "BadSet"
        return write_composite([e.to_string(config) for e in self._elements], config)

    @classmethod
    def parse(cls: Type[U], text: str, config: WeightIOConfig = NO_PARENTHESES) -> U:
        if text.strip() == "EmptySet":
            return cls.zero()
        if text.strip() == "BadSet":
            return cls.no_weight()
        reader = CompositeWeightReader(text, config)
        reader.read_begin()
        elements = []
        more = True
        while more:
            element, more = reader.read_element(lambda t: cls.W.parse(t, config))
            elements.append(element)
        reader.read_end()
        return cls(elements)

    def write(self, stream: BinaryIO) -> None:
        write_struct(stream, "<i", self.size())
        for e in self._elements:
            e.write(stream)

    @classmethod
    def _read(cls: Type[U], stream: BinaryIO) -> U:
        (size,) = read_struct(stream, "<i")
        if size < 0:
            raise WeightParseError(f"Negative {cls.type_name()} size {size}")
        return cls([cls.W._read(stream) for _ in range(size)])

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._elements == other._elements

    def __hash__(self) -> int:
        return hash(tuple(self._elements))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._elements!r})"
