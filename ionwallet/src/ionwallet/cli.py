"""
ION Wallet CLI - Build payments and wills from a chain snapshot.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from loguru import logger
from pydantic import ValidationError

from ioncore.address import decode_address, pubkey_to_p2pkh_address
from ioncore.errors import IonError
from ionwallet.backends.snapshot import SnapshotSource
from ionwallet.config import get_settings
from ionwallet.wallet.models import Inheritor
from ionwallet.wallet.service import WillWallet
from ionwallet.wallet.timelock import generate_single_use_key, generate_timelock_components
from ionwallet.wallet.transfer import create_signed_transaction_hex

app = typer.Typer(
    name="ion-wallet",
    help="ION Wallet - payments and time-locked wills",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def parse_heir(spec: str) -> Inheritor:
    """Parse NAME:ADDRESS:SATS."""
    parts = spec.split(":")
    if len(parts) != 3:
        raise typer.BadParameter(f"Heir must be NAME:ADDRESS:SATS, got {spec!r}")
    name, address, value = parts
    try:
        return Inheritor(name=name, address=address, value=value)
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid heir {spec!r}: {e}") from e


@app.command()
def new_key(
    network: str | None = typer.Option(None, "--network", "-n", help="Bitcoin network"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Generate a new key pair and its P2PKH address."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    network = network or settings.network

    key = generate_single_use_key()
    pubkey = key.public_key.format(compressed=True)

    typer.echo(f"Secret Key: {key.secret.hex()}")
    typer.echo(f"Public Key: {pubkey.hex()}")
    typer.echo(f"Address: {pubkey_to_p2pkh_address(pubkey, network)}")
    typer.echo("\nKEEP THE SECRET KEY SECURE - IT CONTROLS YOUR FUNDS!")


@app.command("decode-address")
def decode_address_command(
    address: str = typer.Argument(..., help="Address to decode"),
) -> None:
    """Show the locking script an address resolves to."""
    setup_logging(get_settings().log_level)

    try:
        decoded = decode_address(address)
    except IonError as e:
        logger.error(f"Cannot decode {address}: {e.message}")
        raise typer.Exit(1)

    typer.echo(f"Type: {decoded.address_type.value}")
    typer.echo(f"Script: {decoded.script_hex}")
    typer.echo(f"Segwit: {decoded.is_segwit}")


@app.command()
def timelock(
    pubkey: str = typer.Option(..., "--pubkey", "-p", help="Owner public key (hex)"),
    locktime: int | None = typer.Option(
        None, "--locktime", "-t", help="Relative locktime in blocks"
    ),
    network: str | None = typer.Option(None, "--network", "-n", help="Bitcoin network"),
) -> None:
    """Generate a vault script and its single-use key."""
    settings = get_settings()
    setup_logging(settings.log_level)
    blocks = settings.default_locktime_blocks if locktime is None else locktime

    try:
        components = generate_timelock_components(pubkey, blocks)
    except IonError as e:
        logger.error(f"Cannot build vault: {e.message}")
        raise typer.Exit(1)

    typer.echo(f"Witness Script: {components.witness_script.hex()}")
    typer.echo(f"Locking Script: {components.locking_script.hex()}")
    typer.echo(f"Vault Address: {components.address(network or settings.network)}")
    typer.echo(f"Sequence: {components.sequence}")
    typer.echo(f"Single-Use Secret Key: {components.single_use_key.secret.hex()}")


@app.command()
def send(
    to: str = typer.Option(..., "--to", help="Destination address"),
    amount: int = typer.Option(..., "--amount", "-a", help="Satoshis to send"),
    address: str = typer.Option(..., "--address", help="Wallet address holding the funds"),
    pubkey: str = typer.Option(..., "--pubkey", "-p", help="Wallet public key (hex)"),
    secret_key: str = typer.Option(
        ..., "--secret-key", envvar="ION_SECRET_KEY", help="Wallet secret key (hex)"
    ),
    fee: int | None = typer.Option(None, "--fee", "-f", help="Absolute fee in satoshis"),
    snapshot: Path | None = typer.Option(None, "--snapshot", "-s", help="Chain snapshot JSON"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Build and sign a payment."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    try:
        source = SnapshotSource.from_file(snapshot or settings.snapshot_path)
    except IonError as e:
        logger.error(e.message)
        raise typer.Exit(1)

    result = create_signed_transaction_hex(
        source,
        to,
        amount,
        settings.default_fee if fee is None else fee,
        address,
        pubkey,
        secret_key,
    )
    if not result.ok:
        logger.error(f"Failed to create transaction: {result.error}")
        raise typer.Exit(1)

    typer.echo(f"TXID: {result.txid}")
    typer.echo(result.tx_hex)


@app.command()
def will(
    heirs: list[str] = typer.Option(..., "--heir", help="Heir as NAME:ADDRESS:SATS (repeatable)"),
    address: str = typer.Option(..., "--address", help="Wallet address holding the funds"),
    pubkey: str = typer.Option(..., "--pubkey", "-p", help="Wallet public key (hex)"),
    secret_key: str = typer.Option(
        ..., "--secret-key", envvar="ION_SECRET_KEY", help="Wallet secret key (hex)"
    ),
    locktime: int | None = typer.Option(
        None, "--locktime", "-t", help="Relative locktime in blocks"
    ),
    snapshot: Path | None = typer.Option(None, "--snapshot", "-s", help="Chain snapshot JSON"),
    heir_output: Path | None = typer.Option(
        None, "--heir-output", help="Write the heir package here"
    ),
    guardian_output: Path | None = typer.Option(
        None, "--guardian-output", help="Write the guardian package here"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Build the will initiation, redemption and revocation transactions."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    inheritors = [parse_heir(heir) for heir in heirs]

    try:
        source = SnapshotSource.from_file(snapshot or settings.snapshot_path)
        wallet = WillWallet(source, address, pubkey, secret_key, settings)
        parts = wallet.set_will(inheritors, locktime)
    except IonError as e:
        logger.error(f"Failed to create will: {e.message}")
        raise typer.Exit(1)

    heir_package = parts.heir_package()
    guardian_package = parts.guardian_package()

    if heir_output:
        heir_output.write_text(heir_package)
        logger.info(f"Heir package written to {heir_output}")
    if guardian_output:
        guardian_output.write_text(guardian_package)
        logger.info(f"Guardian package written to {guardian_output}")

    typer.echo(f"Vault Address: {parts.timelock.address(settings.network)}")
    typer.echo(heir_package + guardian_package)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
