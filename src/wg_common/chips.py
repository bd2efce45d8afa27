"""Integer arithmetic utilities for chip amounts.

All stakes, payouts and balances are int chips. No float, no Decimal.
Floating point only appears inside the price model and never leaves it.
"""


def validate_stake(stake: object) -> int:
    """Return stake as int if it is a positive integer, else raise ValueError."""
    if isinstance(stake, bool) or not isinstance(stake, int):
        raise ValueError(f"Stake must be an integer number of chips, got {stake!r}")
    if stake <= 0:
        raise ValueError(f"Stake must be positive, got {stake}")
    return stake


def chips_to_display(chips: int) -> str:
    """Convert chips to display string: 12500 -> '12,500 chips', -300 -> '-300 chips'."""
    if chips < 0:
        return f"-{-chips:,} chips"
    return f"{chips:,} chips"


def round_half_up(value: float) -> int:
    """Round to nearest int with .5 going towards +inf (Math.round semantics).

    Python's round() is banker's rounding, which would make quotes depend on
    whether the integer part is even.
    """
    return int(value // 1 + (1 if value % 1 >= 0.5 else 0))
