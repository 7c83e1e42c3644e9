"""Fixed-point units shared by the state records and the core kernels."""

from __future__ import annotations

WAD = 10**18

# Fees are pips: 1_000_000 == 100%.
MAX_LP_FEE = 1_000_000
MAX_REPRESENTABLE_FEE = 2**24 - 1

MAX_RATIO = 2**128
MAX_OOB_STREAK = 255


def is_int(x: object) -> bool:
    """True for ints that are not bools."""
    return isinstance(x, int) and not isinstance(x, bool)
