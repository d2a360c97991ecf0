"""
siatx - Sia transaction builder for offline signing

Builds an unsigned siacoin transaction from an address's unspent outputs,
encodes it as a compact blob for an air-gapped signer, and broadcasts the
transaction once the signature comes back.
"""

__version__ = "0.1.0"

from siatx.blob import build_outputs, serialize_transaction_blob, transaction_blob_hex
from siatx.builder import TransactionBuilder
from siatx.constants import CURRENCY_MAX, HASTINGS_PER_SC
from siatx.encoding import decode_currency, encode_currency
from siatx.errors import (
    BroadcastError,
    CancelledByOperator,
    FetchError,
    InsufficientFundsError,
    RangeError,
    SiaTxError,
)
from siatx.handoff import PendingTransaction, request_signature
from siatx.models import SignedTransaction, TransactionOutput, UnspentOutput
from siatx.selection import SelectionResult, filter_mature, select_coins

__all__ = [
    "BroadcastError",
    "CURRENCY_MAX",
    "CancelledByOperator",
    "FetchError",
    "HASTINGS_PER_SC",
    "InsufficientFundsError",
    "PendingTransaction",
    "RangeError",
    "SelectionResult",
    "SiaTxError",
    "SignedTransaction",
    "TransactionBuilder",
    "TransactionOutput",
    "UnspentOutput",
    "build_outputs",
    "decode_currency",
    "encode_currency",
    "filter_mature",
    "request_signature",
    "select_coins",
    "serialize_transaction_blob",
    "transaction_blob_hex",
]
