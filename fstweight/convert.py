import functools
import math
from typing import Generic, Type, TypeVar

from fstweight.composite.expectation import ExpectationWeight
from fstweight.composite.gallic import GallicWeight, GeneralGallicWeight
from fstweight.composite.lexicographic import LexicographicWeight
from fstweight.composite.pair import PairWeight, ProductWeight
from fstweight.composite.power import PowerWeight
from fstweight.composite.sparse_power import SparsePowerWeight
from fstweight.composite.union import UnionWeight
from fstweight.scalar.float_weight import FloatWeightTpl
from fstweight.scalar.signed_log import SignedLogWeightTpl
from fstweight.sequence.set_weight import SetWeightTpl
from fstweight.sequence.string_weight import StringWeightTpl
from fstweight.weight.ops import Weight

W = TypeVar("W", bound=Weight)
V = TypeVar("V", bound=Weight)

# families whose values share the negative log scale
_LOG_SCALE_FAMILIES = frozenset({"tropical", "log"})


def _unsupported(weight: Weight, to_type: Type[Weight]) -> TypeError:
    return TypeError(
        f"convert not implemented from type {type(weight).type_name()} "
        f"to {to_type.type_name()}."
    )


@functools.singledispatch
def convert(weight: Weight, to_type: Type[W]) -> W:
    """
    Converts ``weight`` to the related weight type ``to_type``.

    Supported conversions are between the precisions of a scalar family,
    between the negative log scale families (tropical and log) and the real
    and signed log families, between the variants of string, set and gallic
    weights, between restricted gallic weights and general gallic weights,
    and between composite weights of the same kind whose components convert.
    Non-member weights convert to the sentinel of ``to_type``.

    Example::

        >>> convert(TropicalWeight(2.0), LogWeight) == LogWeight(2.0)
        True

    :param weight: The weight to convert.
    :param to_type: The target weight type.
    :raises TypeError: if no conversion exists between the two types.

    .. note::

        :func:`convert` can be extended to new weight types by registering
        an implementation for the source type using
        :func:`functools.singledispatch` .
    """
    if type(weight) is to_type:
        return weight
    raise _unsupported(weight, to_type)


class WeightConvert(Generic[V, W]):
    """
    A callable converting weights of type ``from_type`` to ``to_type``.

    :param from_type: The type of the weights passed to the converter.
    :param to_type: The type of the converted weights.
    """

    def __init__(self, from_type: Type[V], to_type: Type[W]):
        self.from_type = from_type
        self.to_type = to_type

    def __call__(self, weight: V) -> W:
        if type(weight) is not self.from_type:
            raise TypeError(
                f"{type(self).__name__} expects {self.from_type.type_name()} weights, "
                f"got {type(weight).type_name()}."
            )
        return convert(weight, self.to_type)


@convert.register
def _convert_float(weight: FloatWeightTpl, to_type: Type[W]) -> W:
    if isinstance(to_type, type) and issubclass(to_type, SignedLogWeightTpl):
        return _float_to_signed_log(weight, to_type)
    if not (isinstance(to_type, type) and issubclass(to_type, FloatWeightTpl)):
        raise _unsupported(weight, to_type)
    source, target = type(weight).family, to_type.family
    if source == target or {source, target} <= _LOG_SCALE_FAMILIES:
        return to_type(weight.value)
    if not weight.member():
        return to_type.no_weight()
    if source == "real" and target == "log":
        if weight.value < 0:
            return to_type.no_weight()
        return to_type(-math.log(weight.value) if weight.value > 0 else math.inf)
    if source == "log" and target == "real":
        return to_type(math.exp(-weight.value))
    raise _unsupported(weight, to_type)


def _float_to_signed_log(weight: FloatWeightTpl, to_type):
    family = type(weight).family
    if not weight.member():
        return to_type.no_weight()
    if family in _LOG_SCALE_FAMILIES:
        return to_type(1, weight.value)
    if family == "real":
        p = weight.value
        return to_type(1 if p >= 0 else -1, -math.log(abs(p)) if p else math.inf)
    raise _unsupported(weight, to_type)


@convert.register
def _convert_signed_log(weight: SignedLogWeightTpl, to_type: Type[W]) -> W:
    if isinstance(to_type, type) and issubclass(to_type, SignedLogWeightTpl):
        return to_type(weight.sign, weight.value)
    if not (isinstance(to_type, type) and issubclass(to_type, FloatWeightTpl)):
        raise _unsupported(weight, to_type)
    if to_type.family == "real":
        if not weight.member():
            return to_type.no_weight()
        return to_type(weight.sign * math.exp(-weight.value))
    if to_type.family in _LOG_SCALE_FAMILIES:
        # negative values have no counterpart on the log scale
        if not weight.member() or not weight.positive:
            return to_type.no_weight()
        return to_type(weight.value)
    raise _unsupported(weight, to_type)


@convert.register
def _convert_string(weight: StringWeightTpl, to_type: Type[W]) -> W:
    if not (isinstance(to_type, type) and issubclass(to_type, StringWeightTpl)):
        raise _unsupported(weight, to_type)
    return to_type(weight)


@convert.register
def _convert_set(weight: SetWeightTpl, to_type: Type[W]) -> W:
    if not (isinstance(to_type, type) and issubclass(to_type, SetWeightTpl)):
        raise _unsupported(weight, to_type)
    return to_type(weight)


def _pair_kind(weight_type: type):
    for kind in (GallicWeight, ExpectationWeight, LexicographicWeight, ProductWeight):
        if issubclass(weight_type, kind):
            return kind
    return None


@convert.register
def _convert_pair(weight: PairWeight, to_type: Type[W]) -> W:
    if isinstance(to_type, type) and issubclass(to_type, GeneralGallicWeight):
        if not isinstance(weight, GallicWeight):
            raise _unsupported(weight, to_type)
        if weight == type(weight).zero():
            return to_type.zero()
        return to_type([convert(weight, to_type.W)])
    kind = _pair_kind(type(weight))
    if not (isinstance(to_type, type) and kind is not None and issubclass(to_type, kind)):
        raise _unsupported(weight, to_type)
    return to_type(
        convert(weight.value1, to_type.W1), convert(weight.value2, to_type.W2)
    )


@convert.register
def _convert_power(weight: PowerWeight, to_type: Type[W]) -> W:
    if not (
        isinstance(to_type, type)
        and issubclass(to_type, PowerWeight)
        and to_type.n == weight.n
    ):
        raise _unsupported(weight, to_type)
    return to_type([convert(v, to_type.W) for v in weight])


@convert.register
def _convert_sparse_power(weight: SparsePowerWeight, to_type: Type[W]) -> W:
    if not (isinstance(to_type, type) and issubclass(to_type, SparsePowerWeight)):
        raise _unsupported(weight, to_type)
    return to_type(
        convert(weight.default_value, to_type.W),
        [(index, convert(v, to_type.W)) for index, v in weight.items()],
    )


@convert.register
def _convert_union(weight: UnionWeight, to_type: Type[W]) -> W:
    if (
        isinstance(weight, GeneralGallicWeight)
        and isinstance(to_type, type)
        and issubclass(to_type, GallicWeight)
    ):
        if not weight.member():
            return to_type.no_weight()
        if weight.is_zero():
            return to_type.zero()
        if weight.size() != 1:
            # a single pair cannot hold several strings
            return to_type.no_weight()
        (element,) = weight
        return convert(element, to_type)
    if not (isinstance(to_type, type) and issubclass(to_type, UnionWeight)):
        raise _unsupported(weight, to_type)
    if not weight.member():
        return to_type.no_weight()
    return to_type([convert(e, to_type.W) for e in weight])
