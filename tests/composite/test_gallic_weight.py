import logging

import pytest

from fstweight.composite.gallic import GallicType, GallicWeight, GeneralGallicWeight
from fstweight.scalar.float_weight import LogWeight, TropicalWeight
from fstweight.sequence.string_weight import (
    LeftStringWeight,
    RestrictedStringWeight,
    RightStringWeight,
)
from fstweight.weight.io import PARENTHESES
from fstweight.weight.ops import DivideType

logger = logging.getLogger(__name__)

LeftGallic = GallicWeight[TropicalWeight]
MinGallic = GallicWeight[TropicalWeight, GallicType.MIN]
RestrictedGallic = GallicWeight[TropicalWeight, GallicType.RESTRICT]
GeneralGallic = GeneralGallicWeight[TropicalWeight]


@pytest.mark.parametrize(
    "gallic_type,name,string_type",
    [
        (GallicType.LEFT, "left_gallic_tropical", LeftStringWeight),
        (GallicType.RIGHT, "right_gallic_tropical", RightStringWeight),
        (GallicType.RESTRICT, "restricted_gallic_tropical", RestrictedStringWeight),
        (GallicType.MIN, "min_gallic_tropical", RestrictedStringWeight),
    ],
)
def test_variants(gallic_type, name, string_type):
    W = GallicWeight[TropicalWeight, gallic_type]
    assert W.type_name() == name
    assert W.W1 is string_type
    assert W.W2 is TropicalWeight
    assert W.gallic_type is gallic_type
    assert GallicWeight[TropicalWeight, gallic_type.value] is W


def test_default_variant_is_left():
    assert LeftGallic is GallicWeight[TropicalWeight, GallicType.LEFT]


def test_general_variant():
    assert GallicWeight[TropicalWeight, GallicType.GENERAL] is GeneralGallic
    assert GeneralGallic.type_name() == "gallic_tropical"
    assert GeneralGallic.W is RestrictedGallic


def test_min_gallic_requires_idempotent_weight():
    with pytest.raises(TypeError):
        GallicWeight[LogWeight, GallicType.MIN]


def test_left_gallic_algebra():
    w1 = LeftGallic(LeftStringWeight([1, 2]), 1)
    w2 = LeftGallic(LeftStringWeight([1, 3]), 2)
    assert w1 + w2 == LeftGallic(LeftStringWeight([1]), 1)
    assert w1 * w2 == LeftGallic(LeftStringWeight([1, 2, 1, 3]), 3)
    assert (w1 * w2).divide(w1, DivideType.LEFT) == w2
    assert w1.string == LeftStringWeight([1, 2])
    assert w1.weight == TropicalWeight(1)


def test_reverse():
    w = LeftGallic(LeftStringWeight([1, 2]), 1)
    r = w.reverse()
    assert type(r) is GallicWeight[TropicalWeight, GallicType.RIGHT]
    assert r.string == RightStringWeight([2, 1])
    assert r.reverse() == w
    assert RestrictedGallic.reverse_type() is RestrictedGallic


def test_restricted_gallic_plus_requires_equal_strings():
    w = RestrictedGallic(RestrictedStringWeight([1]), 1)
    assert w + RestrictedGallic(RestrictedStringWeight([1]), 2) == w
    assert not (w + RestrictedGallic(RestrictedStringWeight([2]), 2)).member()


def test_min_gallic_keeps_smaller_weight():
    w1 = MinGallic(RestrictedStringWeight([1]), 1)
    w2 = MinGallic(RestrictedStringWeight([2]), 2)
    assert w1 + w2 == w1
    assert w2 + w1 == w1


def test_min_gallic_breaks_ties_by_string():
    shorter = MinGallic(RestrictedStringWeight([2]), 1)
    longer = MinGallic(RestrictedStringWeight([1, 1]), 1)
    assert shorter + longer == shorter
    assert longer + shorter == shorter
    a = MinGallic(RestrictedStringWeight([1, 2]), 1)
    b = MinGallic(RestrictedStringWeight([1, 3]), 1)
    assert b + a == a


def test_min_gallic_zero_is_identity():
    w = MinGallic(RestrictedStringWeight([3]), 4)
    assert w + MinGallic.zero() == w
    assert MinGallic.zero() + w == w


def test_general_gallic_merges_equal_strings():
    R = RestrictedStringWeight
    w = GeneralGallic(
        [
            RestrictedGallic(R([2]), 1),
            RestrictedGallic(R([1]), 3),
            RestrictedGallic(R([2]), 2),
        ]
    )
    assert w.size() == 2
    assert list(w) == [RestrictedGallic(R([1]), 3), RestrictedGallic(R([2]), 1)]


def test_general_gallic_algebra():
    R = RestrictedStringWeight
    w1 = GeneralGallic([RestrictedGallic(R([1]), 1)])
    w2 = GeneralGallic([RestrictedGallic(R([2]), 2), RestrictedGallic(R([3]), 1)])
    assert w1 + w2 == GeneralGallic(
        [
            RestrictedGallic(R([1]), 1),
            RestrictedGallic(R([2]), 2),
            RestrictedGallic(R([3]), 1),
        ]
    )
    assert w1 * w2 == GeneralGallic(
        [RestrictedGallic(R([1, 2]), 3), RestrictedGallic(R([1, 3]), 2)]
    )
    assert w1 + w1 == w1
    assert GeneralGallic.one() == GeneralGallic([RestrictedGallic.one()])
    assert (w1 * w2).divide(w1, DivideType.LEFT) == w2


def test_general_gallic_reverse():
    w = GeneralGallic([RestrictedGallic(RestrictedStringWeight([1, 2]), 1)])
    r = w.reverse()
    assert type(r) is GeneralGallic
    assert list(r) == [RestrictedGallic(RestrictedStringWeight([2, 1]), 1)]


def test_text_round_trip():
    w = LeftGallic(LeftStringWeight([1, 2]), 1.5)
    assert w.to_string() == "1_2,1.5"
    assert LeftGallic.from_string("1_2,1.5") == w
    g = GeneralGallic([RestrictedGallic(RestrictedStringWeight([1]), 1)])
    text = g.to_string(PARENTHESES)
    assert text == "((1,1))"
    assert GeneralGallic.from_string(text, PARENTHESES) == g
