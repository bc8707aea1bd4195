import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (2.25 -> 2.3).

    The built-in `round` uses banker's rounding, which would turn a 12.5%
    language share into 12.
    """

    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_percent(part: float, total: float) -> int:
    """Share of `part` in `total` as a whole percentage."""

    return int(round_half_up(part / total * 100))
