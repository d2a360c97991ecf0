"""
Transaction blob for the offline signer.

The blob is everything the signer needs to rebuild the v2 sighash:

    input count       uint64 LE
    parent IDs        32 bytes each, in spend order
    output count      uint64 LE
    outputs           address hash (32) + value lo (8) + value hi (8), each
    miner fee         lo (8) + hi (8)

Counts are explicit, there is no padding, and input and output order is
significant: the signer only reproduces the same transaction if the bytes
follow the order chosen here.
"""

from __future__ import annotations

from collections.abc import Sequence

from siatx.constants import CURRENCY_SIZE, HASH_SIZE, UINT64_MAX, UINT64_SIZE
from siatx.encoding import decode_hash, encode_currency, encode_uint64
from siatx.errors import RangeError
from siatx.models import TransactionOutput, UnspentOutput


def build_outputs(
    recipient_address: str,
    amount: int,
    change_address: str,
    change: int,
) -> list[TransactionOutput]:
    """Recipient output first, then change back to the sender if there is any."""
    outputs = [TransactionOutput(value=amount, address=recipient_address)]
    if change > 0:
        outputs.append(TransactionOutput(value=change, address=change_address))
    return outputs


def _encode_count(count: int, what: str) -> bytes:
    if count > UINT64_MAX:
        raise RangeError(f"Too many {what}: {count}")
    return encode_uint64(count)


def serialize_transaction_blob(
    inputs: Sequence[UnspentOutput],
    outputs: Sequence[TransactionOutput],
    fee: int,
) -> bytes:
    """
    Serialize the unsigned transaction for the signer.

    Args:
        inputs: Selected outputs being spent, in spend order
        outputs: New outputs, in transaction order
        fee: Miner fee in hastings

    Returns:
        Raw blob bytes

    Raises:
        RangeError: If a count or value exceeds its encoding
    """
    result = bytearray()

    result += _encode_count(len(inputs), "inputs")
    for utxo in inputs:
        result += decode_hash(utxo.id, exact=True)

    result += _encode_count(len(outputs), "outputs")
    for out in outputs:
        result += decode_hash(out.address)
        result += encode_currency(out.value)

    result += encode_currency(fee)
    return bytes(result)


def transaction_blob_hex(
    inputs: Sequence[UnspentOutput],
    outputs: Sequence[TransactionOutput],
    fee: int,
) -> str:
    """Lowercase hex rendering of the blob for manual transfer."""
    return serialize_transaction_blob(inputs, outputs, fee).hex()


def blob_size(input_count: int, output_count: int) -> int:
    """Expected blob length in bytes."""
    return (
        UINT64_SIZE
        + HASH_SIZE * input_count
        + UINT64_SIZE
        + (HASH_SIZE + CURRENCY_SIZE) * output_count
        + CURRENCY_SIZE
    )
