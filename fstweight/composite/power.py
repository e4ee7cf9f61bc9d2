import functools
from typing import BinaryIO, Callable, ClassVar, Iterable, Iterator, List, Optional, Type, TypeVar

from fstweight.composite.pair import as_weight
from fstweight.weight.io import (
    NO_PARENTHESES,
    CompositeWeightReader,
    WeightIOConfig,
    WeightParseError,
    write_composite,
)
from fstweight.weight.ops import DELTA, DivideType, Weight, WeightProperties

P = TypeVar("P", bound="PowerWeight")


@functools.lru_cache(maxsize=None)
def _power_weight(w: Type[Weight], n: int) -> Type["PowerWeight"]:
    if n < 1:
        raise ValueError(f"PowerWeight requires a positive arity, got {n}.")
    return type(
        f"PowerWeight[{w.__name__}, {n}]",
        (PowerWeight,),
        {"__slots__": (), "W": w, "n": n},
    )


class PowerWeight(Weight):
    """
    The ``n``-th cartesian power of ``W``: a fixed-length tuple of ``W``
    weights under componentwise operations.

        >>> w = PowerWeight[LogWeight, 3]()
        >>> w.set_value(0, LogWeight(2))
        >>> w.value(0) == LogWeight(2)
        True

    A power weight can also be multiplied on either side by a single ``W``,
    which multiplies every component by it.

    Power weights are mutable through :meth:`set_value`; do not mutate a
    weight that is used as a dictionary key.
    """

    __slots__ = ("_values",)

    W: ClassVar[Type[Weight]]
    n: ClassVar[int]

    def __class_getitem__(cls, params):
        w, n = params
        return _power_weight(w, int(n))

    def __init__(self, values: Optional[Iterable] = None):
        if values is None:
            values = [self.W.zero()] * self.n
        elif isinstance(values, PowerWeight):
            values = values._values
        self._values: List[Weight] = [as_weight(self.W, v) for v in values]
        if len(self._values) != self.n:
            raise ValueError(
                f"{type(self).__name__} requires {self.n} components, "
                f"got {len(self._values)}."
            )

    def value(self, i: int) -> Weight:
        return self._values[i]

    def set_value(self, i: int, weight: Weight) -> None:
        self._values[i] = as_weight(self.W, weight)

    def __iter__(self) -> Iterator[Weight]:
        return iter(self._values)

    def __len__(self) -> int:
        return self.n

    @classmethod
    def zero(cls: Type[P]) -> P:
        return cls([cls.W.zero()] * cls.n)

    @classmethod
    def one(cls: Type[P]) -> P:
        return cls([cls.W.one()] * cls.n)

    @classmethod
    def no_weight(cls: Type[P]) -> P:
        return cls([cls.W.no_weight()] * cls.n)

    @classmethod
    def type_name(cls) -> str:
        return f"{cls.W.type_name()}_^{cls.n}"

    @classmethod
    def properties(cls) -> WeightProperties:
        return cls.W.properties() & (
            WeightProperties.SEMIRING
            | WeightProperties.COMMUTATIVE
            | WeightProperties.IDEMPOTENT
        )

    @classmethod
    def reverse_type(cls):
        return PowerWeight[cls.W.reverse_type(), cls.n]

    def _map(self, fn: Callable[[Weight], Weight], weight_type=None):
        return (weight_type or type(self))([fn(v) for v in self._values])

    def _map2(self, other, fn: Callable[[Weight, Weight], Weight]):
        return type(self)([fn(v1, v2) for v1, v2 in zip(self._values, other._values)])

    def member(self) -> bool:
        return all(v.member() for v in self._values)

    def plus(self, other):
        return self._map2(other, lambda v1, v2: v1.plus(v2))

    def times(self, other):
        return self._map2(other, lambda v1, v2: v1.times(v2))

    def divide(self, other, divide_type: DivideType = DivideType.ANY):
        return self._map2(other, lambda v1, v2: v1.divide(v2, divide_type))

    def quantize(self: P, delta: float = DELTA) -> P:
        return self._map(lambda v: v.quantize(delta))

    def reverse(self):
        return self._map(lambda v: v.reverse(), self.reverse_type())

    def approx_equal(self: P, other: P, delta: float = DELTA) -> bool:
        return all(
            v1.approx_equal(v2, delta) for v1, v2 in zip(self._values, other._values)
        )

    def to_string(self, config: WeightIOConfig = NO_PARENTHESES) -> str:
        return write_composite([v.to_string(config) for v in self._values], config)

    @classmethod
    def parse(cls: Type[P], text: str, config: WeightIOConfig = NO_PARENTHESES) -> P:
        reader = CompositeWeightReader(text, config)
        reader.read_begin()
        values = []
        for i in range(cls.n):
            last = i == cls.n - 1
            value, more = reader.read_element(lambda t: cls.W.parse(t, config), last)
            if not last and not more:
                raise WeightParseError(
                    f"Expected {cls.n} components in {cls.type_name()} weight {text!r}"
                )
            values.append(value)
        reader.read_end()
        return cls(values)

    def write(self, stream: BinaryIO) -> None:
        for v in self._values:
            v.write(stream)

    @classmethod
    def _read(cls: Type[P], stream: BinaryIO) -> P:
        return cls([cls.W._read(stream) for _ in range(cls.n)])

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(tuple(self._values))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def __mul__(self, other):
        if type(other) is self.W:
            return self._map(lambda v: v.times(other))
        return super().__mul__(other)

    def __rmul__(self, other):
        if type(other) is self.W:
            return self._map(lambda v: other.times(v))
        return super().__rmul__(other)
