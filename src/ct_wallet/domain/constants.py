"""System ledger accounts. They have wallet entries but no users row."""

ESCROW_ACCOUNT_ID = "SYSTEM_ESCROW"
PLATFORM_ACCOUNT_ID = "SYSTEM_PLATFORM"
