"""
Tests for the transaction build flow.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from siatx.backends.base import ExplorerBackend
from siatx.builder import TransactionBuilder
from siatx.constants import CURRENCY_MAX, HASTINGS_PER_SC
from siatx.encoding import decode_uint64
from siatx.errors import BroadcastError, FetchError, InsufficientFundsError, RangeError
from siatx.models import ChainTip, SignedTransaction, UnspentOutput, UtxoSnapshot
from tests.conftest import OUR_ADDRESS, RECIPIENT_ADDRESS, make_utxo

SC = HASTINGS_PER_SC
FEE_PER_BYTE = 10**18  # 1000 byte estimate -> 10^21 H fee


class FakeExplorer(ExplorerBackend):
    """In-memory backend recording the order of calls."""

    def __init__(self, outputs: list[UnspentOutput], height: int = 1000, fee: int = FEE_PER_BYTE):
        self.outputs = outputs
        self.height = height
        self.fee = fee
        self.basis_counter = 0
        self.calls: list[str] = []
        self.broadcast_mock = AsyncMock()
        self.closed = False

    async def get_utxos(self, address: str) -> UtxoSnapshot:
        self.calls.append("get_utxos")
        self.basis_counter += 1
        await asyncio.sleep(0)
        return UtxoSnapshot(basis={"n": self.basis_counter}, outputs=self.outputs)

    async def get_chain_tip(self) -> ChainTip:
        self.calls.append("get_chain_tip")
        await asyncio.sleep(0)
        return ChainTip.from_api({"height": self.height, "id": "00" * 32})

    async def get_fee_rate(self) -> int:
        self.calls.append("get_fee_rate")
        return self.fee

    async def broadcast(self, basis: Any, transactions: list[SignedTransaction]) -> None:
        self.calls.append("broadcast")
        await self.broadcast_mock(basis, transactions)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def explorer() -> FakeExplorer:
    return FakeExplorer(
        [
            make_utxo(0x01, 1 * SC, maturity_height=10),
            make_utxo(0x02, 5 * SC, maturity_height=10),
            make_utxo(0x03, 3 * SC, maturity_height=10),
            make_utxo(0x04, 50 * SC, maturity_height=5000),
        ]
    )


class TestPrepare:
    """Tests for building the unsigned transaction."""

    @pytest.mark.asyncio
    async def test_prepare_builds_outputs_and_fee(self, explorer: FakeExplorer) -> None:
        builder = TransactionBuilder(explorer)

        pending = await builder.prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 2 * SC)

        fee = FEE_PER_BYTE * 1000
        assert pending.fee == fee
        assert pending.height == 1000
        assert [u.id[:2] for u in pending.inputs] == ["02"]
        assert [(o.address, o.value) for o in pending.outputs] == [
            (RECIPIENT_ADDRESS, 2 * SC),
            (OUR_ADDRESS, 3 * SC - fee),
        ]

    @pytest.mark.asyncio
    async def test_value_conservation(self, explorer: FakeExplorer) -> None:
        pending = await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 7 * SC)

        assert pending.input_total == sum(o.value for o in pending.outputs) + pending.fee

    @pytest.mark.asyncio
    async def test_no_change_output_when_exact(self) -> None:
        explorer = FakeExplorer([make_utxo(0x01, 2 * SC + 1000)], fee=1)
        pending = await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 2 * SC)

        assert len(pending.outputs) == 1
        assert pending.change == 0

    @pytest.mark.asyncio
    async def test_custom_fee_estimate_size(self, explorer: FakeExplorer) -> None:
        builder = TransactionBuilder(explorer, fee_estimate_bytes=250)
        pending = await builder.prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, SC)
        assert pending.fee == FEE_PER_BYTE * 250

    @pytest.mark.asyncio
    async def test_blob_reflects_selection(self, explorer: FakeExplorer) -> None:
        pending = await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 7 * SC)
        blob = bytes.fromhex(pending.blob)

        assert decode_uint64(blob[0:8]) == 2
        assert blob[8:40] == b"\x02" * 32
        assert blob[40:72] == b"\x03" * 32
        assert decode_uint64(blob[72:80]) == 2

    @pytest.mark.asyncio
    async def test_immature_outputs_ignored(self, explorer: FakeExplorer) -> None:
        with pytest.raises(InsufficientFundsError) as exc_info:
            await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 20 * SC)

        assert exc_info.value.available == 9 * SC

    @pytest.mark.asyncio
    async def test_no_mature_outputs(self) -> None:
        explorer = FakeExplorer([make_utxo(0x01, SC, maturity_height=2000)])

        with pytest.raises(InsufficientFundsError, match="No mature UTXOs"):
            await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, SC // 2)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -1])
    async def test_rejects_non_positive_amount(self, explorer: FakeExplorer, amount: int) -> None:
        with pytest.raises(ValueError, match="positive"):
            await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, amount)
        assert explorer.calls == []

    @pytest.mark.asyncio
    async def test_amount_over_128_bits(self, explorer: FakeExplorer) -> None:
        with pytest.raises(RangeError):
            await TransactionBuilder(explorer).prepare(
                OUR_ADDRESS, RECIPIENT_ADDRESS, CURRENCY_MAX
            )

    @pytest.mark.asyncio
    async def test_all_fetches_before_selection(self, explorer: FakeExplorer) -> None:
        await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, SC)

        assert sorted(explorer.calls) == ["get_chain_tip", "get_fee_rate", "get_utxos"]

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, explorer: FakeExplorer) -> None:
        explorer.get_fee_rate = AsyncMock(side_effect=FetchError("txpool/fee", "boom"))

        with pytest.raises(FetchError):
            await TransactionBuilder(explorer).prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, SC)

    @pytest.mark.asyncio
    async def test_failed_fetch_cancels_sibling(self, explorer: FakeExplorer) -> None:
        cancelled = asyncio.Event()

        async def slow_utxos(address: str) -> UtxoSnapshot:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            raise AssertionError("listing should have been cancelled")

        explorer.get_utxos = slow_utxos
        explorer.get_fee_rate = AsyncMock(side_effect=FetchError("txpool/fee", "boom"))

        with pytest.raises(FetchError):
            await TransactionBuilder(explorer).fetch_state(OUR_ADDRESS)

        assert cancelled.is_set()


class TestBroadcast:
    """Tests for broadcasting after the signing pause."""

    @pytest.mark.asyncio
    async def test_refetches_basis_and_reuses_selection(
        self, explorer: FakeExplorer, public_key: str
    ) -> None:
        builder = TransactionBuilder(explorer)
        pending = await builder.prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 2 * SC)
        signed = pending.finalize("sig", public_key)
        explorer.calls.clear()

        await builder.broadcast(pending, signed)

        assert explorer.calls == ["get_utxos", "broadcast"]
        basis, transactions = explorer.broadcast_mock.await_args.args
        assert basis == {"n": 2}
        assert transactions == [signed]
        assert [i.parent.id for i in transactions[0].siacoin_inputs] == [
            u.id for u in pending.inputs
        ]

    @pytest.mark.asyncio
    async def test_spent_input_surfaces_broadcast_error(
        self, explorer: FakeExplorer, public_key: str
    ) -> None:
        builder = TransactionBuilder(explorer)
        pending = await builder.prepare(OUR_ADDRESS, RECIPIENT_ADDRESS, 2 * SC)
        signed = pending.finalize("sig", public_key)
        explorer.broadcast_mock.side_effect = BroadcastError("input already spent", 400)

        with pytest.raises(BroadcastError):
            await builder.broadcast(pending, signed)

        assert explorer.broadcast_mock.await_count == 1


class TestBalance:
    @pytest.mark.asyncio
    async def test_balance(self, explorer: FakeExplorer) -> None:
        result = await TransactionBuilder(explorer).get_balance(OUR_ADDRESS)

        assert result.height == 1000
        assert result.mature == 9 * SC
        assert result.mature_count == 3
        assert result.immature == 50 * SC
        assert result.immature_count == 1


class TestBackendContext:
    @pytest.mark.asyncio
    async def test_context_manager_closes(self, explorer: FakeExplorer) -> None:
        async with explorer as backend:
            assert backend is explorer
        assert explorer.closed
