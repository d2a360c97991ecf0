"""
SiaScan explorer REST backend.

Endpoints used (relative to the configured base URL):
- GET  wallet/api/addresses/{address}/outputs/siacoin
- GET  consensus/tip
- GET  txpool/fee
- POST txpool/broadcast
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from siatx.backends.base import ExplorerBackend
from siatx.errors import BroadcastError, FetchError
from siatx.models import ChainTip, SignedTransaction, UtxoSnapshot, parse_currency

DEFAULT_TIMEOUT = 30.0


class SiaScanBackend(ExplorerBackend):
    """Backend talking to a SiaScan (explored/walletd compatible) REST API."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the backend.

        Args:
            base_url: API base URL, e.g. https://api.siascan.com
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout)

    async def _get(self, endpoint: str) -> Any:
        """Make a read-only API call, raising FetchError on any transport or HTTP failure."""
        url = f"{self.base_url}/{endpoint}"

        try:
            response = await self.client.get(url)
            response.raise_for_status()
            return response.json()

        except httpx.HTTPError as e:
            logger.error(f"Explorer API call failed: {endpoint} - {e}")
            raise FetchError(endpoint, str(e)) from e
        except ValueError as e:
            logger.error(f"Explorer returned invalid JSON: {endpoint} - {e}")
            raise FetchError(endpoint, f"invalid response body: {e}") from e

    async def get_utxos(self, address: str) -> UtxoSnapshot:
        endpoint = f"wallet/api/addresses/{address}/outputs/siacoin"
        data = await self._get(endpoint)

        # Older explorers return a bare list without the basis
        if isinstance(data, list):
            data = {"basis": None, "outputs": data}

        try:
            snapshot = UtxoSnapshot.model_validate(data)
        except ValidationError as e:
            raise FetchError(endpoint, f"malformed output listing: {e}") from e

        logger.debug(f"Fetched {len(snapshot.outputs)} outputs for {address}")
        return snapshot

    async def get_chain_tip(self) -> ChainTip:
        endpoint = "consensus/tip"
        data = await self._get(endpoint)
        try:
            return ChainTip.from_api(data)
        except (KeyError, TypeError, ValidationError) as e:
            raise FetchError(endpoint, f"malformed chain tip: {e}") from e

    async def get_fee_rate(self) -> int:
        endpoint = "txpool/fee"
        data = await self._get(endpoint)
        try:
            return parse_currency(data)
        except ValueError as e:
            raise FetchError(endpoint, f"malformed fee rate: {e}") from e

    async def broadcast(self, basis: Any, transactions: list[SignedTransaction]) -> None:
        """
        Submit v2 transactions to the pool.

        Anything but HTTP 200 is a rejection; the service's response body is
        attached to the BroadcastError as detail.
        """
        url = f"{self.base_url}/txpool/broadcast"
        payload = {
            "basis": basis,
            "transactions": [],
            "v2transactions": [txn.to_api() for txn in transactions],
        }

        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Broadcast request failed: {e}")
            raise BroadcastError(str(e)) from e

        logger.debug(f"Broadcast status: {response.status_code}")

        if response.status_code != 200:
            try:
                detail: Any = response.json()
            except ValueError:
                detail = response.text
            raise BroadcastError(detail, status_code=response.status_code)

    async def close(self) -> None:
        await self.client.aclose()
