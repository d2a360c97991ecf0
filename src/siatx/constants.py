"""
Sia currency and encoding constants.

Amounts are expressed in hastings, the smallest unit of the siacoin:
1 SC = 10^24 hastings. On the wire a currency value is a 128-bit unsigned
integer split into two little-endian 64-bit halves.
"""

from __future__ import annotations

HASTINGS_PER_SC = 10**24

# Encoding limits
UINT64_MAX = 2**64 - 1
CURRENCY_MAX = 2**128 - 1  # largest value a V2 currency can carry

# Field sizes in the transaction blob (bytes)
HASH_SIZE = 32
UINT64_SIZE = 8
CURRENCY_SIZE = 2 * UINT64_SIZE

# The fee is estimated from the network fee rate for a transaction of this size.
# A two-input, two-output v2 transaction stays well below it.
DEFAULT_FEE_ESTIMATE_BYTES = 1000

# Default spend when none is configured: 2 SC
DEFAULT_SEND_AMOUNT = 2 * HASTINGS_PER_SC

# Spend policy constants for single-key unlock conditions
ED25519_KEY_PREFIX = "ed25519:"
UNLOCK_CONDITIONS_POLICY_TYPE = "uc"
