import math


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (14.5 -> 15, not banker's 14)."""
    return int(math.floor(value + 0.5))
