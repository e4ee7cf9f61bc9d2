import logging
import struct

import pytest

from fstweight.sequence.string_weight import (
    LeftStringWeight,
    RestrictedStringWeight,
    RightStringWeight,
    shortlex_less,
)
from fstweight.weight.ops import DivideType, WeightProperties, divide

logger = logging.getLogger(__name__)

STRING_TYPES = [LeftStringWeight, RightStringWeight, RestrictedStringWeight]


@pytest.mark.parametrize(
    "W,name",
    [
        (LeftStringWeight, "left_string"),
        (RightStringWeight, "right_string"),
        (RestrictedStringWeight, "restricted_string"),
    ],
)
def test_type_names(W, name):
    assert W.type_name() == name


@pytest.mark.parametrize("W", STRING_TYPES)
def test_times_concatenates(W):
    assert W([1, 2]) * W([3]) == W([1, 2, 3])
    assert W([1, 2]) * W.one() == W([1, 2])
    assert W.one() * W([1, 2]) == W([1, 2])


@pytest.mark.parametrize("W", STRING_TYPES)
def test_zero_absorbs(W):
    assert W([1, 2]) * W.zero() == W.zero()
    assert W.zero() * W([1, 2]) == W.zero()
    assert W([1, 2]) + W.zero() == W([1, 2])
    assert W.zero() + W([1, 2]) == W([1, 2])
    assert W.zero().member()


@pytest.mark.parametrize("W", STRING_TYPES)
def test_labels_must_be_positive(W):
    with pytest.raises(ValueError):
        W([1, 0])
    with pytest.raises(ValueError):
        W([-3])


def test_left_plus_is_longest_common_prefix():
    assert LeftStringWeight([1, 2, 3]) + LeftStringWeight([1, 2, 4]) == LeftStringWeight(
        [1, 2]
    )
    assert LeftStringWeight([1]) + LeftStringWeight([2]) == LeftStringWeight.one()


def test_right_plus_is_longest_common_suffix():
    assert RightStringWeight([1, 2, 3]) + RightStringWeight([4, 2, 3]) == RightStringWeight(
        [2, 3]
    )
    assert RightStringWeight([1]) + RightStringWeight([2]) == RightStringWeight.one()


def test_restricted_plus_requires_equal_strings():
    w = RestrictedStringWeight([1, 2])
    assert w + RestrictedStringWeight([1, 2]) == w
    assert not (w + RestrictedStringWeight([1, 3])).member()


def test_properties():
    assert LeftStringWeight.properties() & WeightProperties.LEFT_SEMIRING
    assert not LeftStringWeight.properties() & WeightProperties.RIGHT_SEMIRING
    assert RightStringWeight.properties() & WeightProperties.RIGHT_SEMIRING
    assert not RightStringWeight.properties() & WeightProperties.LEFT_SEMIRING
    assert (
        RestrictedStringWeight.properties() & WeightProperties.SEMIRING
        == WeightProperties.SEMIRING
    )
    for W in STRING_TYPES:
        assert W.properties() & WeightProperties.IDEMPOTENT
        assert not W.properties() & WeightProperties.COMMUTATIVE


def test_left_divide():
    w = LeftStringWeight([1, 2, 3])
    assert divide(w, LeftStringWeight([1, 2]), DivideType.LEFT) == LeftStringWeight([3])
    assert not divide(w, LeftStringWeight([2]), DivideType.LEFT).member()
    assert not divide(w, LeftStringWeight([1]), DivideType.RIGHT).member()
    assert not divide(w, LeftStringWeight.zero(), DivideType.LEFT).member()
    assert divide(LeftStringWeight.zero(), w, DivideType.LEFT) == LeftStringWeight.zero()


def test_right_divide():
    w = RightStringWeight([1, 2, 3])
    assert divide(w, RightStringWeight([2, 3]), DivideType.RIGHT) == RightStringWeight([1])
    assert not divide(w, RightStringWeight([2]), DivideType.RIGHT).member()
    assert not divide(w, RightStringWeight([3]), DivideType.LEFT).member()
    assert divide(w, RightStringWeight.one(), DivideType.RIGHT) == w


def test_restricted_divide_either_side():
    w = RestrictedStringWeight([1, 2, 3])
    assert divide(w, RestrictedStringWeight([1]), DivideType.LEFT) == (
        RestrictedStringWeight([2, 3])
    )
    assert divide(w, RestrictedStringWeight([3]), DivideType.RIGHT) == (
        RestrictedStringWeight([1, 2])
    )
    assert not divide(w, RestrictedStringWeight([1]), DivideType.ANY).member()


def test_reverse():
    w = LeftStringWeight([1, 2, 3])
    r = w.reverse()
    assert type(r) is RightStringWeight
    assert r == RightStringWeight([3, 2, 1])
    assert r.reverse() == w
    assert LeftStringWeight.zero().reverse() == RightStringWeight.zero()
    assert type(RestrictedStringWeight([1]).reverse()) is RestrictedStringWeight


def test_left_and_right_are_distinct_types():
    assert LeftStringWeight([1]) != RightStringWeight([1])
    with pytest.raises(TypeError):
        LeftStringWeight([1]) + RightStringWeight([1])


@pytest.mark.parametrize(
    "w,text",
    [
        (LeftStringWeight([1, 2, 3]), "1_2_3"),
        (LeftStringWeight([7]), "7"),
        (LeftStringWeight.one(), "Epsilon"),
        (LeftStringWeight.zero(), "Infinity"),
        (LeftStringWeight.no_weight(), "BadString"),
    ],
)
def test_text_format(w, text):
    assert w.to_string() == text
    assert LeftStringWeight.from_string(text) == w


@pytest.mark.parametrize("text", ["1__2", "a_b", "0", "1_-2"])
def test_malformed_text_gives_sentinel(text):
    assert not LeftStringWeight.from_string(text).member()


@pytest.mark.parametrize(
    "w",
    [
        RightStringWeight([4, 5, 6]),
        RightStringWeight.one(),
        RightStringWeight.zero(),
    ],
)
def test_binary_round_trip(w):
    assert RightStringWeight.from_bytes(w.to_bytes()) == w


def test_shortlex_less():
    assert shortlex_less(LeftStringWeight([5]), LeftStringWeight([1, 1]))
    assert shortlex_less(LeftStringWeight([1, 2]), LeftStringWeight([1, 3]))
    assert not shortlex_less(LeftStringWeight([1, 3]), LeftStringWeight([1, 2]))
    assert not shortlex_less(LeftStringWeight([1]), LeftStringWeight([1]))
    assert shortlex_less(LeftStringWeight.one(), LeftStringWeight([1]))
    assert shortlex_less(LeftStringWeight.zero(), LeftStringWeight([1]))


@pytest.mark.parametrize(
    "data",
    [
        struct.pack("<ii", 1, 0),
        struct.pack("<ii", 1, -5),
        struct.pack("<iii", 2, 3, -1),
        struct.pack("<ii", 3, 1),
    ],
)
def test_corrupt_binary_gives_sentinel(data, caplog):
    with caplog.at_level(logging.WARNING):
        w = LeftStringWeight.from_bytes(data)
    assert not w.member()
    assert "Failed to read left_string weight" in caplog.text
