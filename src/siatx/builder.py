"""
Transaction build orchestration.

Ties the backend reads, coin selection, blob serialization and broadcast
together around the two-phase signing handoff:

    pending = await builder.prepare(source, recipient, amount)
    ...  # pending.blob goes to the offline signer
    signed = pending.finalize(signature, public_key)
    await builder.broadcast(pending, signed)
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from siatx.backends.base import ExplorerBackend, run_concurrently
from siatx.blob import build_outputs
from siatx.constants import DEFAULT_FEE_ESTIMATE_BYTES
from siatx.errors import InsufficientFundsError
from siatx.handoff import PendingTransaction
from siatx.models import NetworkState, SignedTransaction, UtxoSnapshot
from siatx.selection import filter_mature, select_coins


@dataclass(frozen=True)
class AddressBalance:
    height: int
    mature: int
    immature: int
    mature_count: int
    immature_count: int


class TransactionBuilder:
    """Builds single-signer siacoin transactions for offline signing."""

    def __init__(
        self,
        backend: ExplorerBackend,
        fee_estimate_bytes: int = DEFAULT_FEE_ESTIMATE_BYTES,
    ):
        self.backend = backend
        self.fee_estimate_bytes = fee_estimate_bytes

    def estimate_fee(self, fee_per_byte: int) -> int:
        return fee_per_byte * self.fee_estimate_bytes

    async def fetch_state(self, address: str) -> tuple[UtxoSnapshot, NetworkState]:
        """Fetch outputs and network state concurrently; both must succeed."""
        snapshot, network = await run_concurrently(
            self.backend.get_utxos(address),
            self.backend.get_network_state(),
        )
        logger.info(f"Found {len(snapshot.outputs)} UTXOs")
        logger.info(f"Current height: {network.height}")
        return snapshot, network

    async def prepare(
        self, source_address: str, recipient_address: str, amount: int
    ) -> PendingTransaction:
        """
        Select inputs and build the unsigned transaction.

        Change, if any, is sent back to source_address.

        Raises:
            ValueError: If amount is not positive
            InsufficientFundsError: If mature outputs cannot cover amount + fee
            RangeError: If a value cannot be encoded
            FetchError: If a backend read fails
        """
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")

        snapshot, network = await self.fetch_state(source_address)
        fee = self.estimate_fee(network.fee_per_byte)

        mature = filter_mature(snapshot.outputs, network.height)
        if not mature:
            raise InsufficientFundsError(
                needed=amount + fee, available=0, message="No mature UTXOs available"
            )

        selection = select_coins(mature, amount, fee)
        outputs = build_outputs(recipient_address, amount, source_address, selection.change)

        pending = PendingTransaction(
            source_address=source_address,
            amount=amount,
            fee=fee,
            height=network.height,
            inputs=selection.selected,
            outputs=outputs,
        )
        # Serializing once up front rejects unencodable values before anything is shown
        blob = pending.blob
        logger.debug(f"Built {len(blob) // 2} byte blob")

        return pending

    async def broadcast(self, pending: PendingTransaction, signed: SignedTransaction) -> None:
        """
        Broadcast against a freshly read basis.

        The originally selected inputs are reused as-is; if one was spent while
        waiting for the signature the pool rejects the transaction and
        BroadcastError propagates.
        """
        fresh = await self.backend.get_utxos(pending.source_address)
        logger.debug(f"Transaction object: {signed.model_dump_json(by_alias=True, indent=2)}")
        logger.info("Broadcasting transaction...")
        await self.backend.broadcast(fresh.basis, [signed])
        logger.info("Transaction broadcast successfully")

    async def get_balance(self, address: str) -> AddressBalance:
        snapshot, network = await self.fetch_state(address)
        mature = filter_mature(snapshot.outputs, network.height)
        immature = [u for u in snapshot.outputs if not u.is_mature(network.height)]
        return AddressBalance(
            height=network.height,
            mature=sum(u.value for u in mature),
            immature=sum(u.value for u in immature),
            mature_count=len(mature),
            immature_count=len(immature),
        )
