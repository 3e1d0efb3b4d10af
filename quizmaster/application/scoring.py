"""
Time-decayed scoring.

    t <= 5          full points
    5 < t <= 10     linear decay from 100% down to 70%
    t > 10          flat 50%

Wrong answers earn nothing. Results are rounded half-up to 2 decimals.
"""

from decimal import ROUND_HALF_UP, Decimal

FULL_POINTS_WINDOW = 5
DECAY_WINDOW_END = 10
DECAY_DROP = 0.3
SLOW_MULTIPLIER = 0.5

_CENTS = Decimal("0.01")


def round_points(value: float) -> float:
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def time_multiplier(response_time: int) -> float:
    if response_time <= FULL_POINTS_WINDOW:
        return 1.0
    if response_time <= DECAY_WINDOW_END:
        decay_span = DECAY_WINDOW_END - FULL_POINTS_WINDOW
        return 1.0 - ((response_time - FULL_POINTS_WINDOW) / decay_span) * DECAY_DROP
    return SLOW_MULTIPLIER


def calculate_score(base_points: int, response_time: int, is_correct: bool) -> float:
    if base_points <= 0:
        raise ValueError(f"base_points must be positive, got {base_points}")
    if response_time < 0:
        raise ValueError(f"response_time must be non-negative, got {response_time}")

    if not is_correct:
        return 0.0
    return round_points(base_points * time_multiplier(response_time))

