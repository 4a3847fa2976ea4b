"""Pydantic schemas for the ct_wallet API."""

from pydantic import BaseModel, Field

from src.ct_common.cents import cents_to_display
from src.ct_common.datetime_utils import iso_or_none
from src.ct_wallet.domain.models import WalletEntry


class AdjustmentRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    amount_cents: int = Field(..., description="Signed amount in cents; never zero")
    reason: str = Field(..., min_length=1, max_length=500)


class BalanceResponse(BaseModel):
    user_id: str
    balance_cents: int
    balance_display: str

    @classmethod
    def from_cents(cls, user_id: str, balance: int) -> "BalanceResponse":
        return cls(
            user_id=user_id,
            balance_cents=balance,
            balance_display=cents_to_display(balance),
        )


class WalletEntryItem(BaseModel):
    id: int
    entry_type: str
    amount_cents: int
    amount_display: str
    reason: str
    reference_type: str | None
    reference_id: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, e: WalletEntry) -> "WalletEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount_cents=e.amount_cents,
            amount_display=cents_to_display(e.amount_cents),
            reason=e.reason,
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            created_at=iso_or_none(e.created_at),
        )


class WalletEntriesResponse(BaseModel):
    items: list[WalletEntryItem]
    next_cursor: str | None
    has_more: bool
