import logging

import pytest

from fstweight.composite.pair import ProductWeight
from fstweight.scalar.float_weight import LogWeight, RealWeight, TropicalWeight
from fstweight.sequence.string_weight import LeftStringWeight, RightStringWeight
from fstweight.weight.io import NO_PARENTHESES, PARENTHESES
from fstweight.weight.ops import DivideType, WeightProperties

logger = logging.getLogger(__name__)

TropicalLog = ProductWeight[TropicalWeight, LogWeight]


def test_specialization_is_cached():
    assert ProductWeight[TropicalWeight, LogWeight] is TropicalLog
    assert ProductWeight[LogWeight, TropicalWeight] is not TropicalLog
    assert issubclass(TropicalLog, ProductWeight)


def test_type_name():
    assert TropicalLog.type_name() == "tropical_X_log"
    nested = ProductWeight[TropicalLog, TropicalWeight]
    assert nested.type_name() == "tropical_X_log_X_tropical"


def test_components_are_converted():
    w = TropicalLog(1, 2.0)
    assert type(w.value1) is TropicalWeight
    assert type(w.value2) is LogWeight
    assert w.value1 == TropicalWeight(1)
    assert TropicalLog(w) == w


def test_single_argument_must_be_pair():
    with pytest.raises(TypeError):
        TropicalLog(1.0)


def test_componentwise_algebra():
    w1, w2 = TropicalLog(1, 2), TropicalLog(3, 4)
    assert w1 + w2 == TropicalLog(TropicalWeight(1), LogWeight(2) + LogWeight(4))
    assert w1 * w2 == TropicalLog(4, 6)
    assert (w1 * w2).divide(w2) == w1
    assert TropicalLog.zero() == TropicalLog(TropicalWeight.zero(), LogWeight.zero())
    assert TropicalLog.one() == TropicalLog(0, 0)


def test_properties_intersect_components():
    assert TropicalLog.properties() == (
        WeightProperties.SEMIRING | WeightProperties.COMMUTATIVE
    )
    TT = ProductWeight[TropicalWeight, TropicalWeight]
    assert TT.properties() & WeightProperties.IDEMPOTENT
    assert not TT.properties() & WeightProperties.PATH


def test_member_requires_both_components():
    assert TropicalLog(1, 2).member()
    assert not TropicalLog(TropicalWeight.no_weight(), LogWeight(1)).member()
    assert not TropicalLog.no_weight().member()


def test_string_product_reverse_and_divide():
    W = ProductWeight[LeftStringWeight, TropicalWeight]
    w = W(LeftStringWeight([1, 2]), 3)
    r = w.reverse()
    assert type(r) is ProductWeight[RightStringWeight, TropicalWeight]
    assert r == ProductWeight[RightStringWeight, TropicalWeight](
        RightStringWeight([2, 1]), 3
    )
    quotient = w.divide(W(LeftStringWeight([1]), 1), DivideType.LEFT)
    assert quotient == W(LeftStringWeight([2]), 2)


def test_quantize_and_approx_equal():
    W = ProductWeight[RealWeight, TropicalWeight]
    w = W(1.0001, 2.0001)
    assert w.approx_equal(W(1, 2))
    assert w.quantize() == W(1, 2)
    assert not w.approx_equal(W(1, 2.1))


@pytest.mark.parametrize(
    "config,text", [(NO_PARENTHESES, "1,2"), (PARENTHESES, "(1,2)")]
)
def test_text(config, text):
    w = TropicalLog(1, 2)
    assert w.to_string(config) == text
    assert TropicalLog.from_string(text, config) == w


def test_nested_text_with_parentheses():
    W = ProductWeight[TropicalLog, TropicalLog]
    w = W(TropicalLog(1, 2), TropicalLog(3, 4))
    text = w.to_string(PARENTHESES)
    assert text == "((1,2),(3,4))"
    assert W.from_string(text, PARENTHESES) == w


def test_binary_round_trip():
    W = ProductWeight[LeftStringWeight, LogWeight]
    w = W(LeftStringWeight([3, 1]), 0.25)
    assert W.from_bytes(w.to_bytes()) == w


def test_repr():
    assert repr(TropicalLog(1, 2)) == (
        "ProductWeight[TropicalWeight, LogWeight](TropicalWeight('1'), LogWeight('2'))"
    )
