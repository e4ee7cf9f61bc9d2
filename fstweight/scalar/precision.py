import math
from typing import NamedTuple

import torch


class FloatPrecision(NamedTuple):
    """
    Floating point representation of a scalar weight family.

    Scalar weights store a Python ``float`` but round it to ``dtype`` on
    construction and after every operation, so that 32-bit weights behave like
    single precision values and the two precisions of a family never compare
    as interchangeable.
    """

    dtype: torch.dtype
    #: Appended to the family name to form :meth:`Weight.type_name`.
    suffix: str
    #: :mod:`struct` format of the binary encoding.
    struct_format: str
    #: Significant digits needed for an exact text round trip.
    digits: int

    def round(self, value: float) -> float:
        if self.dtype == torch.float64:
            return float(value)
        return torch.tensor(value, dtype=self.dtype).item()

    def format(self, value: float) -> str:
        if math.isnan(value):
            return "BadNumber"
        if value == math.inf:
            return "Infinity"
        if value == -math.inf:
            return "-Infinity"
        return format(value, f".{self.digits}g")


FLOAT32 = FloatPrecision(torch.float32, "", "<f", 9)
FLOAT64 = FloatPrecision(torch.float64, "64", "<d", 17)


def parse_float(text: str) -> float:
    text = text.strip()
    if text == "Infinity":
        return math.inf
    if text == "-Infinity":
        return -math.inf
    if text == "BadNumber":
        return math.nan
    return float(text)


def log_pos_exp(x: float) -> float:
    """``log(1 + exp(-x))``, for ``x >= 0``."""
    return math.log1p(math.exp(-x))


def log_neg_exp(x: float) -> float:
    """``log(1 - exp(-x))``, for ``x > 0``."""
    if x > math.log(2):
        return math.log1p(-math.exp(-x))
    return math.log(-math.expm1(-x))
