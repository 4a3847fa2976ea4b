"""Integer arithmetic utilities for cents-based money.

All prices, amounts, and balances use int (cents). No float, no Decimal.
"""

from src.ct_common.errors import ValidationError


def validate_amount(amount_cents: int, field: str = "amount_cents") -> None:
    """Reject zero and non-int amounts. Sign is the caller's concern."""
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ValidationError(field, "must be an integer number of cents")
    if amount_cents == 0:
        raise ValidationError(field, "must be non-zero")


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def calculate_fee(amount: int, fee_rate_bps: int) -> int:
    """Platform fee with ceiling division (platform never loses a cent).

    fee = ceil(amount * fee_rate_bps / 10000)
    """
    if amount == 0 or fee_rate_bps == 0:
        return 0
    return (amount * fee_rate_bps + 9999) // 10000
