"""
Coin selection for siacoin transactions.

Greedy selection: candidates are taken largest-first until the running total
covers the amount plus fee. This keeps the number of inputs low without a
combinatorial search; the leftover becomes a change output.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from siatx.constants import CURRENCY_MAX
from siatx.errors import InsufficientFundsError, RangeError
from siatx.models import UnspentOutput


@dataclass(frozen=True)
class SelectionResult:
    """Result of coin selection"""

    selected: list[UnspentOutput]
    total: int
    needed: int

    @property
    def change(self) -> int:
        return self.total - self.needed


def filter_mature(outputs: Iterable[UnspentOutput], height: int) -> list[UnspentOutput]:
    """Keep the outputs spendable at the given chain height, preserving order."""
    return [utxo for utxo in outputs if utxo.is_mature(height)]


def select_coins(
    outputs: Sequence[UnspentOutput], target_amount: int, fee_amount: int
) -> SelectionResult:
    """
    Select outputs covering target_amount + fee_amount.

    Candidates are sorted by value descending; ties keep their original
    relative order. The caller's sequence is not modified.

    Args:
        outputs: Spendable (already maturity-filtered) outputs
        target_amount: Amount to send in hastings
        fee_amount: Miner fee in hastings

    Returns:
        SelectionResult with the chosen outputs in spend order

    Raises:
        RangeError: If an amount is negative or target + fee exceeds 128 bits
        InsufficientFundsError: If all candidates together fall short
    """
    if target_amount < 0 or fee_amount < 0:
        raise RangeError("Target and fee must be non-negative")

    needed = target_amount + fee_amount
    if needed > CURRENCY_MAX:
        raise RangeError(f"Required amount {needed} exceeds 128 bits")

    candidates = sorted(outputs, key=lambda u: u.value, reverse=True)

    selected: list[UnspentOutput] = []
    total = 0

    for utxo in candidates:
        if total >= needed:
            break
        selected.append(utxo)
        total += utxo.value

    if total < needed:
        raise InsufficientFundsError(needed=needed, available=total)

    logger.debug(
        f"Selected {len(selected)} of {len(candidates)} outputs: "
        f"total={total}, needed={needed}, change={total - needed}"
    )

    return SelectionResult(selected=selected, total=total, needed=needed)
