"""
Chain data backends.

Available backends:
- SiaScanBackend: explorer REST API (UTXO listing, chain tip, fee rate, broadcast)
"""

from siatx.backends.base import ExplorerBackend
from siatx.backends.explorer import SiaScanBackend

__all__ = [
    "ExplorerBackend",
    "SiaScanBackend",
]
