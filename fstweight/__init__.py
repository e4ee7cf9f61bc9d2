from fstweight.adder import adder
from fstweight.composite.expectation import ExpectationWeight
from fstweight.composite.gallic import GallicType, GallicWeight, GeneralGallicWeight
from fstweight.composite.lexicographic import LexicographicWeight
from fstweight.composite.pair import ProductWeight
from fstweight.composite.power import PowerWeight
from fstweight.composite.sparse_power import SparsePowerWeight
from fstweight.composite.union import UnionWeight, UnionWeightOptions
from fstweight.convert import WeightConvert, convert
from fstweight.scalar.float_weight import (
    LogWeight,
    LogWeight64,
    MinMaxWeight,
    MinMaxWeight64,
    RealWeight,
    RealWeight64,
    TropicalWeight,
    TropicalWeight64,
)
from fstweight.scalar.signed_log import SignedLogWeight, SignedLogWeight64
from fstweight.sequence.set_weight import (
    BooleanSetWeight,
    IntersectUnionSetWeight,
    RestrictedSetWeight,
    SetType,
    UnionIntersectSetWeight,
)
from fstweight.sequence.string_weight import (
    LeftStringWeight,
    RestrictedStringWeight,
    RightStringWeight,
    StringType,
)
from fstweight.weight.io import (
    NO_PARENTHESES,
    PARENTHESES,
    WeightIOConfig,
    WeightParseError,
    parentheses,
)
from fstweight.weight.ops import (
    DELTA,
    DivideType,
    Weight,
    WeightProperties,
    approx_equal,
    divide,
    minus,
    natural_less,
    plus,
    power,
    quantize,
    times,
)

__version__ = "0.1.0"
