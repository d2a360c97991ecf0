"""
Signing handoff between the builder and the offline signer.

Building is split in two phases so the pause for a signature does not depend
on any particular I/O mechanism:

1. prepare: the builder returns a PendingTransaction whose ``blob`` goes to
   the signer (printed, written to a checkpoint file, queued, ...).
2. finalize: the signature that comes back is combined with the pending
   data into a SignedTransaction.

Nothing is fetched or sent while a transaction is pending.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from pydantic import BaseModel, Field, field_serializer, field_validator

from siatx.assembler import assemble_transaction
from siatx.blob import transaction_blob_hex
from siatx.errors import CancelledByOperator
from siatx.models import SignedTransaction, TransactionOutput, UnspentOutput, parse_currency


class PendingTransaction(BaseModel):
    """An unsigned transaction waiting for its signature."""

    source_address: str
    amount: int
    fee: int
    height: int = Field(..., ge=0)
    inputs: list[UnspentOutput]
    outputs: list[TransactionOutput] = Field(..., min_length=1)

    @field_validator("amount", "fee", mode="before")
    @classmethod
    def validate_currency(cls, v: Any) -> int:
        return parse_currency(v)

    @field_serializer("amount", "fee")
    def serialize_currency(self, v: int) -> str:
        return str(v)

    @property
    def blob(self) -> str:
        """Hex blob for the signer."""
        return transaction_blob_hex(self.inputs, self.outputs, self.fee)

    @property
    def input_total(self) -> int:
        return sum(utxo.value for utxo in self.inputs)

    @property
    def change(self) -> int:
        return self.input_total - self.amount - self.fee

    def finalize(self, signature: str | None, public_key: str) -> SignedTransaction:
        """
        Combine the pending data with the signer's output.

        Raises:
            CancelledByOperator: If no signature was supplied
        """
        if signature is None:
            raise CancelledByOperator("No signature provided")
        return assemble_transaction(self.inputs, self.outputs, self.fee, signature, public_key)

    def save(self, path: Path) -> None:
        """Write a checkpoint so signing can happen outside this process."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(by_alias=True, indent=2))
        logger.info(f"Pending transaction saved to {path}")

    @classmethod
    def load(cls, path: Path) -> PendingTransaction:
        return cls.model_validate_json(path.read_text())

    model_config = {"frozen": True}


def request_signature(
    blob: str,
    prompt: Callable[..., str] = typer.prompt,
    echo: Callable[[str], Any] = typer.echo,
) -> str | None:
    """
    Show the blob to the operator and block until a signature is entered.

    There is no timeout. Empty input, end of input or Ctrl-C all mean the
    operator cancelled.

    Returns:
        The signature, or None if the operator cancelled
    """
    echo("\n=== TRANSACTION BLOB FOR OFFLINE SIGNER ===")
    echo(blob)
    echo("\nCopy this hex to your signer and paste the signature here:")

    try:
        answer = prompt("Signature", default="", show_default=False)
    except typer.Abort:
        return None

    signature = answer.strip()
    return signature or None
