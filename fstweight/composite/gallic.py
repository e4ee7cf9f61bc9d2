import enum
import functools
from typing import ClassVar, Type

from fstweight.composite.pair import ProductWeight
from fstweight.composite.union import UnionWeight, UnionWeightOptions
from fstweight.sequence.string_weight import (
    LeftStringWeight,
    RestrictedStringWeight,
    RightStringWeight,
    shortlex_less,
)
from fstweight.weight.ops import Weight, WeightProperties, natural_less


class GallicType(enum.Enum):
    """
    Variants of the gallic weight, which pairs an output string with a
    weight. The variant fixes the string type and the behavior of ``Plus``:

    - ``LEFT``, ``RIGHT``: the longest common prefix or suffix of the strings,
    - ``RESTRICT``: only defined on equal strings,
    - ``MIN``: the pair with the smaller weight in the natural order,
    - ``GENERAL``: a union of restricted pairs, one per distinct string.
    """

    LEFT = "left"
    RIGHT = "right"
    RESTRICT = "restricted"
    MIN = "min"
    GENERAL = "general"


_STRING_TYPES = {
    GallicType.LEFT: LeftStringWeight,
    GallicType.RIGHT: RightStringWeight,
    GallicType.RESTRICT: RestrictedStringWeight,
    GallicType.MIN: RestrictedStringWeight,
}

_REVERSE_GALLIC_TYPES = {
    GallicType.LEFT: GallicType.RIGHT,
    GallicType.RIGHT: GallicType.LEFT,
}


@functools.lru_cache(maxsize=None)
def _gallic_weight(w: Type[Weight], gallic_type: GallicType) -> Type["GallicWeight"]:
    if gallic_type is GallicType.GENERAL:
        return _general_gallic_weight(w)
    base = GallicWeight
    if gallic_type is GallicType.MIN:
        if not w.properties() & WeightProperties.IDEMPOTENT:
            raise TypeError(
                f"Min gallic weights require an idempotent weight type, got {w.type_name()}."
            )
        base = MinGallicWeight
    return type(
        f"GallicWeight[{w.__name__}, {gallic_type.name}]",
        (base,),
        {
            "__slots__": (),
            "W1": _STRING_TYPES[gallic_type],
            "W2": w,
            "gallic_type": gallic_type,
        },
    )


class GallicWeight(ProductWeight):
    """
    The product of a string weight and a weight ``W``, used to encode the
    output labels of a transducer into its weights.

    ``GallicWeight[W]`` is the left gallic weight; ``GallicWeight[W, variant]``
    selects a :class:`GallicType`. ``GallicWeight[W, GallicType.GENERAL]`` is
    :class:`GeneralGallicWeight` ``[W]``.
    """

    __slots__ = ()

    gallic_type: ClassVar[GallicType]

    def __class_getitem__(cls, params):
        if isinstance(params, tuple):
            w, gallic_type = params
        else:
            w, gallic_type = params, GallicType.LEFT
        return _gallic_weight(w, GallicType(gallic_type))

    @property
    def string(self):
        return self._value1

    @property
    def weight(self):
        return self._value2

    @classmethod
    def type_name(cls) -> str:
        return f"{cls.gallic_type.value}_gallic_{cls.W2.type_name()}"

    @classmethod
    def reverse_type(cls):
        gallic_type = _REVERSE_GALLIC_TYPES.get(cls.gallic_type, cls.gallic_type)
        return GallicWeight[cls.W2.reverse_type(), gallic_type]


class MinGallicWeight(GallicWeight):
    """
    Gallic weight whose ``Plus`` keeps the pair with the smaller weight,
    breaking ties between equal weights by the shortlex order of the strings.
    """

    __slots__ = ()

    def plus(self, other):
        if not self.member() or not other.member():
            return self.no_weight()
        zero = self.zero()
        if self == zero:
            return other
        if other == zero:
            return self
        if natural_less(self._value2, other._value2):
            return self
        if natural_less(other._value2, self._value2):
            return other
        return other if shortlex_less(other._value1, self._value1) else self


def _gallic_less(g1: GallicWeight, g2: GallicWeight) -> bool:
    return shortlex_less(g1.string, g2.string)


def _gallic_merge(g1: GallicWeight, g2: GallicWeight) -> GallicWeight:
    return type(g1)(g1.string, g1.weight.plus(g2.weight))


GALLIC_UNION_OPTIONS = UnionWeightOptions(_gallic_less, _gallic_merge)


@functools.lru_cache(maxsize=None)
def _general_gallic_weight(w: Type[Weight]) -> Type["GeneralGallicWeight"]:
    return type(
        f"GeneralGallicWeight[{w.__name__}]",
        (GeneralGallicWeight,),
        {
            "__slots__": (),
            "W": GallicWeight[w, GallicType.RESTRICT],
            "options": GALLIC_UNION_OPTIONS,
            "weight_type": w,
        },
    )


class GeneralGallicWeight(UnionWeight):
    """
    A union of restricted gallic weights with distinct strings, ordered by
    the shortlex order of the strings. ``Plus`` of two elements with the same
    string sums their weights.
    """

    __slots__ = ()

    weight_type: ClassVar[Type[Weight]]

    def __class_getitem__(cls, params):
        return _general_gallic_weight(params)

    @classmethod
    def type_name(cls) -> str:
        return f"gallic_{cls.weight_type.type_name()}"

    @classmethod
    def reverse_type(cls):
        return GeneralGallicWeight[cls.weight_type.reverse_type()]
