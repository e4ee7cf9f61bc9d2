import bisect
import functools
from typing import (
    BinaryIO,
    Callable,
    ClassVar,
    Dict,
    Iterator,
    List,
    Optional,
    Tuple,
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
from fstweight.weight.ops import DELTA, DivideType, Weight, WeightProperties

S = TypeVar("S", bound="SparsePowerWeight")


@functools.lru_cache(maxsize=None)
def _sparse_power_weight(w: Type[Weight]) -> Type["SparsePowerWeight"]:
    return type(
        f"SparsePowerWeight[{w.__name__}]",
        (SparsePowerWeight,),
        {"__slots__": (), "W": w},
    )


class SparsePowerWeight(Weight):
    """
    A mapping from non-negative indices to ``W`` weights in which every
    index not set explicitly holds :attr:`default_value`.

    Only entries that differ from the default are stored, kept sorted by
    index; :meth:`size` counts them. Setting an entry to the default value
    removes it::

        >>> w = SparsePowerWeight[LogWeight]()
        >>> w.set_default_value(LogWeight(17))
        >>> w.set_value(10, LogWeight(10))
        >>> w.size()
        1
        >>> w.set_value(10, LogWeight(17))
        >>> w.size(), w.value(10) == LogWeight(17)
        (0, True)

    Operations apply componentwise to the union of explicit indices, and to
    the two defaults to produce the result's default. A sparse power weight
    can also be multiplied on either side by a single ``W``, which
    multiplies the default and every entry by it.
    """

    __slots__ = ("_default", "_entries", "_indices")

    W: ClassVar[Type[Weight]]

    def __class_getitem__(cls, params):
        return _sparse_power_weight(params)

    def __init__(
        self,
        default_value: Optional[Weight] = None,
        entries=(),
    ):
        if isinstance(default_value, SparsePowerWeight):
            entries = default_value.items()
            default_value = default_value._default
        self._default = (
            self.W.zero() if default_value is None else as_weight(self.W, default_value)
        )
        self._entries: Dict[int, Weight] = {}
        self._indices: List[int] = []
        if isinstance(entries, dict):
            entries = entries.items()
        for index, value in entries:
            self.set_value(index, value)

    @property
    def default_value(self) -> Weight:
        return self._default

    def set_default_value(self, weight: Weight) -> None:
        self._default = as_weight(self.W, weight)
        for index in [i for i in self._indices if self._entries[i] == self._default]:
            self._remove(index)

    def value(self, index: int) -> Weight:
        return self._entries.get(index, self._default)

    def set_value(self, index: int, weight: Weight) -> None:
        if index < 0:
            raise ValueError(f"Sparse power indices must be non-negative, got {index}.")
        weight = as_weight(self.W, weight)
        if weight == self._default:
            if index in self._entries:
                self._remove(index)
            return
        if index not in self._entries:
            bisect.insort(self._indices, index)
        self._entries[index] = weight

    def _remove(self, index: int) -> None:
        del self._entries[index]
        del self._indices[bisect.bisect_left(self._indices, index)]

    def size(self) -> int:
        return len(self._indices)

    def items(self) -> Iterator[Tuple[int, Weight]]:
        """Yields the explicit ``(index, value)`` entries in index order."""
        for index in self._indices:
            yield index, self._entries[index]

    def __iter__(self) -> Iterator[Tuple[int, Weight]]:
        return self.items()

    @classmethod
    def zero(cls: Type[S]) -> S:
        return cls(cls.W.zero())

    @classmethod
    def one(cls: Type[S]) -> S:
        return cls(cls.W.one())

    @classmethod
    def no_weight(cls: Type[S]) -> S:
        return cls(cls.W.no_weight())

    @classmethod
    def type_name(cls) -> str:
        return f"sparse_{cls.W.type_name()}_^n"

    @classmethod
    def properties(cls) -> WeightProperties:
        return cls.W.properties() & (
            WeightProperties.SEMIRING
            | WeightProperties.COMMUTATIVE
            | WeightProperties.IDEMPOTENT
        )

    @classmethod
    def reverse_type(cls):
        return SparsePowerWeight[cls.W.reverse_type()]

    def _map(self, fn: Callable[[Weight], Weight], weight_type=None):
        result = (weight_type or type(self))(fn(self._default))
        for index, value in self.items():
            result.set_value(index, fn(value))
        return result

    def _merged_indices(self, other) -> List[int]:
        return sorted(set(self._indices).union(other._indices))

    def _map2(self, other, fn: Callable[[Weight, Weight], Weight]):
        result = type(self)(fn(self._default, other._default))
        for index in self._merged_indices(other):
            result.set_value(index, fn(self.value(index), other.value(index)))
        return result

    def member(self) -> bool:
        return self._default.member() and all(
            v.member() for v in self._entries.values()
        )

    def plus(self, other):
        return self._map2(other, lambda v1, v2: v1.plus(v2))

    def times(self, other):
        return self._map2(other, lambda v1, v2: v1.times(v2))

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        return self._map2(other, lambda v1, v2: v1.divide(v2, divide_type))

    def quantize(self: S, delta: float = DELTA) -> S:
        return self._map(lambda v: v.quantize(delta))

    def reverse(self):
        return self._map(lambda v: v.reverse(), self.reverse_type())

    def approx_equal(self: S, other: S, delta: float = DELTA) -> bool:
        if not self._default.approx_equal(other._default, delta):
            return False
        return all(
            self.value(i).approx_equal(other.value(i), delta)
            for i in self._merged_indices(other)
        )

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        parts = [self._default.to_string(config)]
        for index, value in self.items():
            parts.append(str(index))
            parts.append(value.to_string(config))
        return write_composite(parts, config)

    @classmethod
    def parse(cls: Type[S], text: str, config: WeightIOConfig = NO_PARENTHESES) -> S:
        reader = CompositeWeightReader(text, config)
        reader.read_begin()
        default, more = reader.read_element(lambda t: cls.W.parse(t, config))
        weight = cls(default)
        while more:
            index, more = reader.read_element(cls._parse_index)
            if not more:
                raise WeightParseError(
                    f"Missing value for index {index} in {cls.type_name()} weight {text!r}"
                )
            value, more = reader.read_element(lambda t: cls.W.parse(t, config))
            weight.set_value(index, value)
        reader.read_end()
        return weight

    @classmethod
    def _parse_index(cls, text: str) -> int:
        try:
            index = int(text)
        except ValueError:
            raise WeightParseError(f"Bad {cls.type_name()} index {text!r}") from None
        if index < 0:
            raise WeightParseError(f"Negative {cls.type_name()} index {index}")
        return index

    def write(self, stream: BinaryIO) -> None:
        self._default.write(stream)
        write_struct(stream, "<i", self.size())
        for index, value in self.items():
            write_struct(stream, "<q", index)
            value.write(stream)

    @classmethod
    def _read(cls: Type[S], stream: BinaryIO) -> S:
        weight = cls(cls.W._read(stream))
        (size,) = read_struct(stream, "<i")
        if size < 0:
            raise WeightParseError(f"Negative {cls.type_name()} size {size}")
        for _ in range(size):
            (index,) = read_struct(stream, "<q")
            if index < 0:
                raise WeightParseError(f"Negative {cls.type_name()} index {index}")
            weight.set_value(index, cls.W._read(stream))
        return weight

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._default == other._default and self._entries == other._entries

    def __hash__(self) -> int:
        return hash((self._default, tuple(self.items())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._default!r}, {dict(self.items())!r})"

    def __mul__(self, other):
        if type(other) is self.W:
            return self._map(lambda v: v.times(other))
        return super().__mul__(other)

    def __rmul__(self, other):
        if type(other) is self.W:
            return self._map(lambda v: other.times(v))
        return super().__rmul__(other)
