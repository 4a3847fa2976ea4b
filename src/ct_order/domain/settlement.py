"""Money legs for order transitions.

Every movement is a set of signed wallet legs that sum to zero across the
user and system accounts, so escrow returns to zero once an order settles:

  capture  (→ PAID)       escrow +amount
  release  (→ COMPLETED)  escrow -amount, student +(amount - fee), platform +fee
  refund   (→ CANCELLED)  escrow -amount, buyer +amount

Capture has no user-side leg: the buyer's card is charged outside the wallet.
"""

from src.ct_common.cents import calculate_fee
from src.ct_common.enums import WalletEntryType
from src.ct_order.domain.models import Order
from src.ct_wallet.domain.constants import ESCROW_ACCOUNT_ID, PLATFORM_ACCOUNT_ID
from src.ct_wallet.domain.models import WalletLeg

REFERENCE_TYPE = "ORDER"


def capture_legs(order: Order) -> list[WalletLeg]:
    return [
        WalletLeg(
            user_id=ESCROW_ACCOUNT_ID,
            amount_cents=order.amount_cents,
            entry_type=WalletEntryType.PAYMENT_CAPTURE.value,
            reason=f"Payment captured for order #{order.order_number}",
            reference_type=REFERENCE_TYPE,
            reference_id=order.id,
        )
    ]


def release_legs(order: Order, fee_rate_bps: int) -> list[WalletLeg]:
    fee = calculate_fee(order.amount_cents, fee_rate_bps)
    payout = order.amount_cents - fee
    legs = [
        WalletLeg(
            user_id=ESCROW_ACCOUNT_ID,
            amount_cents=-order.amount_cents,
            entry_type=WalletEntryType.ESCROW_RELEASE.value,
            reason=f"Escrow released for order #{order.order_number}",
            reference_type=REFERENCE_TYPE,
            reference_id=order.id,
        ),
        WalletLeg(
            user_id=order.student_id,
            amount_cents=payout,
            entry_type=WalletEntryType.PAYOUT.value,
            reason=f"Payment for completed order #{order.order_number}",
            reference_type=REFERENCE_TYPE,
            reference_id=order.id,
        ),
    ]
    if fee > 0:
        legs.append(
            WalletLeg(
                user_id=PLATFORM_ACCOUNT_ID,
                amount_cents=fee,
                entry_type=WalletEntryType.PLATFORM_FEE.value,
                reason=f"Platform fee for order #{order.order_number}",
                reference_type=REFERENCE_TYPE,
                reference_id=order.id,
            )
        )
    # A 100% fee leaves no payout; zero-amount legs are not allowed in the ledger
    return [leg for leg in legs if leg.amount_cents != 0]


def refund_legs(order: Order) -> list[WalletLeg]:
    return [
        WalletLeg(
            user_id=ESCROW_ACCOUNT_ID,
            amount_cents=-order.amount_cents,
            entry_type=WalletEntryType.ESCROW_RELEASE.value,
            reason=f"Escrow returned for cancelled order #{order.order_number}",
            reference_type=REFERENCE_TYPE,
            reference_id=order.id,
        ),
        WalletLeg(
            user_id=order.buyer_id,
            amount_cents=order.amount_cents,
            entry_type=WalletEntryType.REFUND.value,
            reason=f"Refund for cancelled order #{order.order_number}",
            reference_type=REFERENCE_TYPE,
            reference_id=order.id,
        ),
    ]
