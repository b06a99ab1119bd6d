import math
import sys

FLOAT_MAX = sys.float_info.max


def bound(x: float) -> float:
    """Clamps infinities to the largest finite float, keeping the sign."""
    if math.isinf(x):
        return FLOAT_MAX if x > 0 else -FLOAT_MAX
    return x


def clip(x: float, lower: float, upper: float) -> float:
    return max(min(x, upper), lower)
