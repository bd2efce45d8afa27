"""Ledger constants."""

# Chips credited to an account the first time the identity boundary hands us its id.
# Not recorded as a LedgerEntry: balance == STARTING_BALANCE + sum(entry.amount).
DEFAULT_STARTING_BALANCE = 10_000
