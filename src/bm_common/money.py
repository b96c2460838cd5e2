"""Integer money utilities.

All prices, totals and balances are int in minor currency units
(1 UGX = 100 minor units). No float, no Decimal.
"""

MINOR_UNITS_PER_MAJOR = 100


def to_display(amount: int, currency: str = "UGX") -> str:
    """Format minor units for display: 1050000 -> 'UGX 10,500.00', -1200 -> '-UGX 12.00'."""
    sign = "-" if amount < 0 else ""
    abs_amount = -amount if amount < 0 else amount
    major, minor = divmod(abs_amount, MINOR_UNITS_PER_MAJOR)
    return f"{sign}{currency} {major:,}.{minor:02d}"


def calculate_bps(amount: int, rate_bps: int) -> int:
    """Apply a basis-point rate with ceiling division (platform never under-collects).

    result = ceil(amount * rate_bps / 10000)
    Using integer ceiling: (a + b - 1) // b
    """
    if amount == 0 or rate_bps == 0:
        return 0
    return (amount * rate_bps + 9999) // 10000
