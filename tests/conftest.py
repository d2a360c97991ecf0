"""
Test configuration for siatx tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from siatx.constants import HASTINGS_PER_SC
from siatx.models import UnspentOutput

OUR_ADDRESS = "aa" * 32 + "0123456789ab"  # 32-byte hash + 6-byte checksum
RECIPIENT_ADDRESS = "bb" * 32 + "ba9876543210"
PUBLIC_KEY = "cc" * 32


def make_utxo(
    id_byte: int,
    value: int,
    maturity_height: int = 0,
    address: str = OUR_ADDRESS,
    **extra: Any,
) -> UnspentOutput:
    """Build an explorer-shaped siacoin element with a repeated-byte ID."""
    return UnspentOutput.model_validate(
        {
            "id": f"{id_byte:02x}" * 32,
            "siacoinOutput": {"value": str(value), "address": address},
            "maturityHeight": maturity_height,
            **extra,
        }
    )


@pytest.fixture
def our_address() -> str:
    return OUR_ADDRESS


@pytest.fixture
def recipient_address() -> str:
    return RECIPIENT_ADDRESS


@pytest.fixture
def public_key() -> str:
    return PUBLIC_KEY


@pytest.fixture
def sample_utxos() -> list[UnspentOutput]:
    """Three mature outputs and one immature output."""
    return [
        make_utxo(0x01, 1 * HASTINGS_PER_SC, maturity_height=100),
        make_utxo(0x02, 5 * HASTINGS_PER_SC, maturity_height=100),
        make_utxo(0x03, 3 * HASTINGS_PER_SC, maturity_height=100),
        make_utxo(0x04, 50 * HASTINGS_PER_SC, maturity_height=10_000),
    ]
