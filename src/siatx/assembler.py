"""
Assemble a signed v2 transaction from the selection and an external signature.

Only single-key unlock conditions are produced: one ed25519 public key, one
required signature, no timelock and no preimages.
"""

from __future__ import annotations

from collections.abc import Sequence

from siatx.constants import ED25519_KEY_PREFIX
from siatx.errors import CancelledByOperator
from siatx.models import (
    SatisfiedPolicy,
    SignedInput,
    SignedTransaction,
    SpendPolicy,
    TransactionOutput,
    UnlockConditions,
    UnspentOutput,
)


def normalize_public_key(public_key: str) -> str:
    """Return the key in 'ed25519:<hex>' form."""
    key = public_key.strip()
    if not key:
        raise ValueError("Public key required to build unlock conditions")
    if key.startswith(ED25519_KEY_PREFIX):
        return key
    return f"{ED25519_KEY_PREFIX}{key}"


def single_key_policy(public_key: str, signature: str) -> SatisfiedPolicy:
    conditions = UnlockConditions(
        timelock=0,
        public_keys=[normalize_public_key(public_key)],
        signatures_required=1,
    )
    return SatisfiedPolicy(
        policy=SpendPolicy(policy=conditions),
        signatures=[signature],
        preimages=[],
    )


def assemble_transaction(
    inputs: Sequence[UnspentOutput],
    outputs: Sequence[TransactionOutput],
    fee: int,
    signature: str,
    public_key: str,
) -> SignedTransaction:
    """
    Build the signed transaction.

    The signature is opaque here; the transaction pool verifies it.

    Raises:
        CancelledByOperator: If the signature is empty
        ValueError: If the public key is empty or inputs do not balance outputs plus fee
    """
    signature = signature.strip()
    if not signature:
        raise CancelledByOperator("No signature provided")

    input_total = sum(utxo.value for utxo in inputs)
    output_total = sum(out.value for out in outputs) + fee
    if input_total != output_total:
        raise ValueError(
            f"Inputs ({input_total}) do not equal outputs plus fee ({output_total})"
        )

    policy = single_key_policy(public_key, signature)

    return SignedTransaction(
        siacoin_inputs=[SignedInput(parent=utxo, satisfied_policy=policy) for utxo in inputs],
        siacoin_outputs=list(outputs),
        miner_fee=fee,
    )
