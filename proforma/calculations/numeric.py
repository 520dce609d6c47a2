"""Numeric guards shared by the calculation modules.

Degenerate inputs (zero area, zero units, zero cap rate) resolve to 0.0
instead of letting NaN or infinity reach downstream metrics.
"""

import math


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` for a zero denominator or non-finite result."""
    if denominator == 0:
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def capitalized_value(noi: float, cap_rate: float) -> float:
    """Value NOI at a cap rate. A cap rate <= 0 means value undefined -> 0.0."""
    if cap_rate <= 0:
        return 0.0
    return finite_or_zero(noi / cap_rate)


def finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def compound_growth(rate: float, periods: float) -> float:
    """Growth factor (1 + rate) ** periods."""
    return (1 + rate) ** periods
