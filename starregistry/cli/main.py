# starregistry/cli/main.py
"""
CLI for registering, looking up and verifying stars on a local star ledger.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from starregistry.config import RegistrySettings
from starregistry.core.errors import BlockNotFound, NoStarsFound, RegistryError
from starregistry.crypto.keys import WalletKeyPair
from starregistry.registry import StarRegistry
from starregistry.storage import SQLiteStorage
from starregistry.verify.validator import ChainValidator

app = typer.Typer(
    name="star-registry",
    help="Register and look up stars on a tamper-evident ledger",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def get_db_path(ctx: typer.Context, db_flag: Optional[Path] = None) -> Path:
    """Resolve DB path in this order:
    1. --db flag on the command
    2. --db flag on the app
    3. STAR_REGISTRY_DB_PATH environment variable
    4. Default: ./star-registry.db
    """
    flag = db_flag or (ctx.obj or {}).get("db")
    path = flag if flag else RegistrySettings.from_env().db_path
    path = Path(path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def open_registry(ctx: typer.Context, db: Optional[Path]) -> StarRegistry:
    db_path = get_db_path(ctx, db)
    settings = RegistrySettings.from_env()
    try:
        return StarRegistry(storage=f"sqlite://{db_path}", settings=settings)
    except RegistryError as e:
        console.print(f"[red]Stored chain is corrupted: {e}[/]")
        console.print("[yellow]Run `star-registry verify` for the full violation list.[/]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Failed to open database {db_path}: {e}[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Path to SQLite database (overrides STAR_REGISTRY_DB_PATH env var)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Manage a local star registry."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {"db": db}


@app.command()
def height(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Print the current chain height."""
    with open_registry(ctx, db) as registry:
        console.print(str(registry.get_chain_height()))


@app.command()
def challenge(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="Wallet address requesting ownership verification"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Issue a challenge message for ADDRESS to sign."""
    with open_registry(ctx, db) as registry:
        console.print(registry.request_message_ownership_verification(address), soft_wrap=True)


@app.command()
def keygen():
    """Generate a new Ed25519 wallet and print its address and private key."""
    wallet = WalletKeyPair.generate()
    console.print(f"address:     {wallet.address}", soft_wrap=True)
    console.print(f"private key: {wallet.private_key_b64url()}", soft_wrap=True)
    console.print("[yellow]Keep the private key secret; it cannot be recovered.[/]")


@app.command()
def sign(
    message: str = typer.Argument(..., help="Challenge message to sign"),
    key: str = typer.Option(..., "--key", "-k", help="Base64url private key from `keygen`"),
):
    """Sign a challenge message with a wallet private key."""
    try:
        wallet = WalletKeyPair.from_private_b64url(key)
    except ValueError as e:
        console.print(f"[red]Invalid private key: {e}[/]")
        raise typer.Exit(1)
    console.print(wallet.sign(message), soft_wrap=True)


@app.command()
def submit(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="Wallet address claiming the star"),
    message: str = typer.Argument(..., help="Challenge message returned by `challenge`"),
    signature: str = typer.Argument(..., help="Signature of the message"),
    star: str = typer.Option(..., "--star", help='Star as JSON, e.g. \'{"dec": "+1", "ra": "5h", "story": "..."}\''),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Submit a signed ownership proof and register a star."""
    try:
        star_obj = json.loads(star)
    except json.JSONDecodeError as e:
        console.print(f"[red]--star is not valid JSON: {e}[/]")
        raise typer.Exit(1)
    if not isinstance(star_obj, dict):
        console.print("[red]--star must be a JSON object[/]")
        raise typer.Exit(1)

    with open_registry(ctx, db) as registry:
        try:
            block = registry.submit_star(address, message, signature, star_obj)
        except RegistryError as e:
            console.print(f"[red]✗ {type(e).__name__}: {e}[/]")
            raise typer.Exit(1)

    console.print(f"[green]✓ Star registered at height {block.height}[/]")
    console.print(f"  hash: {block.hash}", soft_wrap=True)


@app.command()
def block(
    ctx: typer.Context,
    block_hash: Optional[str] = typer.Option(None, "--hash", help="Look up by block hash"),
    at_height: Optional[int] = typer.Option(None, "--height", help="Look up by height"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Show a single block, looked up by hash or by height."""
    if (block_hash is None) == (at_height is None):
        console.print("[red]Pass exactly one of --hash or --height[/]")
        raise typer.Exit(1)

    with open_registry(ctx, db) as registry:
        try:
            if block_hash is not None:
                found = registry.get_block_by_hash(block_hash)
            else:
                found = registry.get_block_by_height(at_height)
        except BlockNotFound as e:
            console.print(f"[yellow]{e}[/]")
            raise typer.Exit(1)

    data = found.to_dict()
    data["body"] = found.decode()
    console.print_json(data=data)


@app.command()
def stars(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="Owner wallet address"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """List the stars owned by ADDRESS."""
    with open_registry(ctx, db) as registry:
        try:
            owned = registry.get_stars_by_wallet_address(address)
        except NoStarsFound as e:
            console.print(f"[yellow]{e}[/]")
            return

    table = Table(title=f"Stars owned by {address}")
    table.add_column("#")
    table.add_column("Star")
    for i, item in enumerate(owned, start=1):
        table.add_row(str(i), json.dumps(item.star, sort_keys=True))
    console.print(table)


@app.command()
def verify(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Verify the integrity of the stored chain (hash links + block hashes)."""
    db_path = get_db_path(ctx, db)

    if not db_path.exists():
        console.print(f"[red]Database file not found: {db_path}[/]")
        raise typer.Exit(1)

    try:
        with SQLiteStorage(db_path) as storage:
            chain = storage.load_blocks()
    except Exception as e:
        console.print(f"[red]Failed to load chain from {db_path}: {e}[/]")
        raise typer.Exit(1)

    if not chain:
        console.print("[yellow]Database holds no blocks yet.[/]")
        raise typer.Exit(1)

    result = ChainValidator().validate(chain)
    if result.is_valid:
        console.print(f"[green]✓ Chain of {len(chain)} blocks is valid[/]")
        console.print(f"  {result.message}")
    else:
        console.print("[red]✗ Chain verification failed[/]")
        for v in result.violations:
            console.print(f"  • [{v.height}] {v.kind.value}: {v.message}")
        raise typer.Exit(1)


@app.command()
def export(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: star-chain.jsonl)"),
):
    """Export the chain as JSONL (one block per line)."""
    with open_registry(ctx, db) as registry:
        chain = registry.store.get_chain()

    out_path = output or Path("star-chain.jsonl")
    with open(out_path, "w", encoding="utf-8") as f:
        for b in chain:
            json.dump(b.to_dict(), f, separators=(",", ":"))
            f.write("\n")

    console.print(f"[green]Exported {len(chain)} blocks to {out_path}[/]")


if __name__ == "__main__":
    app()
