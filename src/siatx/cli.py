"""
Command-line interface for building offline-signed Sia transactions.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from siatx.backends.explorer import SiaScanBackend
from siatx.builder import TransactionBuilder
from siatx.config import Settings, get_settings
from siatx.encoding import format_sc
from siatx.errors import BroadcastError, CancelledByOperator, SiaTxError
from siatx.handoff import PendingTransaction, request_signature

app = typer.Typer(
    name="siatx",
    help="Sia Transaction Builder - build, sign offline, broadcast",
    add_completion=False,
)


def setup_logging(level: str) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def require(value: str | None, name: str, env_var: str) -> str:
    """Return a required setting or exit with an explanation."""
    if not value:
        logger.error(f"{name} required. Use --{name.lower().replace(' ', '-')} or {env_var}")
        raise typer.Exit(1)
    return value


def print_summary(pending: PendingTransaction) -> None:
    typer.echo("\nTransaction Details:")
    typer.echo(f"Inputs: {len(pending.inputs)} UTXOs")
    typer.echo(f"Total input: {format_sc(pending.input_total)}")
    typer.echo(f"Send: {format_sc(pending.amount)}")
    typer.echo(f"Fee: {format_sc(pending.fee)}")
    typer.echo(f"Change: {format_sc(pending.change)}")


def make_builder(settings: Settings, api_url: str | None) -> TransactionBuilder:
    backend = SiaScanBackend(
        base_url=api_url or settings.siascan_api_base_url,
        timeout=settings.request_timeout,
    )
    return TransactionBuilder(backend, fee_estimate_bytes=settings.fee_estimate_bytes)


async def _prepare(
    settings: Settings, api_url: str | None, address: str, recipient: str, amount: int
) -> PendingTransaction:
    builder = make_builder(settings, api_url)
    async with builder.backend:
        return await builder.prepare(address, recipient, amount)


async def _broadcast(
    settings: Settings,
    api_url: str | None,
    pending: PendingTransaction,
    public_key: str,
    signature: str | None,
) -> None:
    signed = pending.finalize(signature, public_key)
    builder = make_builder(settings, api_url)
    async with builder.backend:
        await builder.broadcast(pending, signed)


def run_prepare(
    settings: Settings, api_url: str | None, address: str, recipient: str, amount: int
) -> PendingTransaction:
    try:
        return asyncio.run(_prepare(settings, api_url, address, recipient, amount))
    except (SiaTxError, ValueError) as e:
        logger.error(str(e))
        raise typer.Exit(1)


def run_broadcast(
    settings: Settings,
    api_url: str | None,
    pending: PendingTransaction,
    public_key: str,
    signature: str | None,
) -> None:
    """Assemble and broadcast; a missing signature ends the run without error."""
    try:
        asyncio.run(_broadcast(settings, api_url, pending, public_key, signature))
    except CancelledByOperator:
        logger.info("No signature provided")
        return
    except BroadcastError as e:
        logger.error(f"Broadcast error: {e.detail}")
        raise typer.Exit(1)
    except (SiaTxError, ValueError) as e:
        logger.error(str(e))
        raise typer.Exit(1)

    typer.echo("Transaction broadcast successfully!")


AddressOption = Annotated[
    str | None,
    typer.Option("--address", envvar="OUR_ADDRESS", help="Sending address (also receives change)"),
]
RecipientOption = Annotated[
    str | None,
    typer.Option("--recipient", "-r", envvar="RECIPIENT_ADDRESS", help="Recipient address"),
]
AmountOption = Annotated[
    int | None, typer.Option("--amount", "-a", help="Amount in hastings (1 SC = 10^24 H)")
]
PublicKeyOption = Annotated[
    str | None,
    typer.Option("--public-key", envvar="PUBLIC_KEY", help="ed25519 public key of the address"),
]
ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", envvar="SIASCAN_API_BASE_URL", help="SiaScan API base URL"),
]
LogLevelOption = Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")]


@app.command()
def send(
    recipient: RecipientOption = None,
    amount: AmountOption = None,
    address: AddressOption = None,
    public_key: PublicKeyOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Build a transaction, wait for the offline signature, then broadcast it."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    source = require(address or settings.our_address, "Address", "OUR_ADDRESS")
    destination = require(recipient or settings.recipient_address, "Recipient", "RECIPIENT_ADDRESS")
    key = require(public_key or settings.public_key, "Public key", "PUBLIC_KEY")
    send_amount = amount if amount is not None else settings.send_amount

    typer.echo("=== Sia Transaction Builder ===")
    pending = run_prepare(settings, api_url, source, destination, send_amount)
    print_summary(pending)

    # The prepare-phase client is closed here; nothing is in flight while waiting
    signature = request_signature(pending.blob)
    if signature is None:
        logger.info("No signature provided")
        return

    run_broadcast(settings, api_url, pending, key, signature)


@app.command()
def prepare(
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Where to write the pending transaction")
    ] = Path("pending-transaction.json"),
    recipient: RecipientOption = None,
    amount: AmountOption = None,
    address: AddressOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Build a transaction and save it for signing; prints the blob."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    source = require(address or settings.our_address, "Address", "OUR_ADDRESS")
    destination = require(recipient or settings.recipient_address, "Recipient", "RECIPIENT_ADDRESS")
    send_amount = amount if amount is not None else settings.send_amount

    pending = run_prepare(settings, api_url, source, destination, send_amount)
    print_summary(pending)
    try:
        pending.save(output)
    except OSError as e:
        logger.error(f"Failed to write pending transaction: {e}")
        raise typer.Exit(1)

    typer.echo("\n=== TRANSACTION BLOB FOR OFFLINE SIGNER ===")
    typer.echo(pending.blob)
    typer.echo(f"\nOnce signed, run: siatx submit --pending {output} --signature <sig>")


@app.command()
def submit(
    pending_file: Annotated[
        Path, typer.Option("--pending", "-p", help="Pending transaction written by 'prepare'")
    ] = Path("pending-transaction.json"),
    signature: Annotated[
        str | None, typer.Option("--signature", "-s", help="Signature from the offline signer")
    ] = None,
    public_key: PublicKeyOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Attach the signature to a pending transaction and broadcast it."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    key = require(public_key or settings.public_key, "Public key", "PUBLIC_KEY")

    if not pending_file.exists():
        logger.error(f"Pending transaction not found: {pending_file}")
        raise typer.Exit(1)

    try:
        pending = PendingTransaction.load(pending_file)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load pending transaction: {e}")
        raise typer.Exit(1)

    if signature is None:
        signature = request_signature(pending.blob)

    run_broadcast(settings, api_url, pending, key, signature)


@app.command()
def balance(
    address: AddressOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Show spendable and immature siacoin balance of an address."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    source = require(address or settings.our_address, "Address", "OUR_ADDRESS")

    async def _balance():
        builder = make_builder(settings, api_url)
        async with builder.backend:
            return await builder.get_balance(source)

    try:
        result = asyncio.run(_balance())
    except SiaTxError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    typer.echo(f"\nHeight: {result.height}")
    typer.echo(f"Spendable: {format_sc(result.mature)} ({result.mature_count} outputs)")
    typer.echo(f"Immature:  {format_sc(result.immature)} ({result.immature_count} outputs)")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
