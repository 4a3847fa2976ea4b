"""Domain models for ct_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WalletEntry:
    id: int                          # BIGSERIAL
    user_id: str
    amount_cents: int                # positive=credit negative=debit
    entry_type: str                  # WalletEntryType value
    reason: str
    reference_type: str | None = None
    reference_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class WalletLeg:
    """One ledger line to be appended; legs of one movement share a reference."""

    user_id: str
    amount_cents: int
    entry_type: str
    reason: str
    reference_type: str | None = None
    reference_id: str | None = None
