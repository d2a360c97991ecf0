"""
Base explorer backend interface.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from typing import Any

from siatx.models import ChainTip, NetworkState, SignedTransaction, UtxoSnapshot


async def run_concurrently(*coros: Coroutine[Any, Any, Any]) -> list[Any]:
    """
    Await coroutines concurrently; the first failure cancels the rest.

    The failure is re-raised on its own rather than wrapped in an
    ExceptionGroup, so callers catch FetchError as usual.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(coro) for coro in coros]
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return [task.result() for task in tasks]


class ExplorerBackend(ABC):
    """
    Abstract chain data backend.

    Reads are side-effect free and are never retried here; a failing read
    raises FetchError and retry policy is left to the caller.
    """

    @abstractmethod
    async def get_utxos(self, address: str) -> UtxoSnapshot:
        """Get siacoin outputs owned by an address, with the basis they were read at"""

    @abstractmethod
    async def get_chain_tip(self) -> ChainTip:
        """Get current chain height and consensus basis"""

    @abstractmethod
    async def get_fee_rate(self) -> int:
        """Get recommended fee in hastings per byte"""

    @abstractmethod
    async def broadcast(self, basis: Any, transactions: list[SignedTransaction]) -> None:
        """Submit v2 transactions to the transaction pool. Raises BroadcastError on rejection."""

    async def get_network_state(self) -> NetworkState:
        """Fetch chain tip and fee rate concurrently."""
        tip, fee_per_byte = await run_concurrently(self.get_chain_tip(), self.get_fee_rate())
        return NetworkState(height=tip.height, basis=tip.basis, fee_per_byte=fee_per_byte)

    async def close(self) -> None:
        """Close backend connection"""
        pass

    async def __aenter__(self) -> ExplorerBackend:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
