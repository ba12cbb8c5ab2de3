"""
nfteth.cli
----------

Drive a local custody deployment from the shell. State lives in a JSON file
(``--state``, default ``$NFTETH_STATE_PATH`` or ``nfteth-state.json``) and is
rewritten after every successful mutating command.

Examples
--------
nfteth init --admin admin
nfteth deploy-token DERC20 --name DummyErc20 --owner admin
nfteth faucet derc20 alice 10000 --caller admin
nfteth whitelist derc20 --caller admin
nfteth approve derc20 100 --caller alice
nfteth deposit derc20 100 --caller alice          # prints the certificate id
nfteth transfer-certificate 1 bob --caller alice
nfteth redeem 1 --caller bob
nfteth show

Accounts and contracts are referenced by label (``alice``, ``derc20``) or by
0x-hex address. A ``--caller`` must already exist (``nfteth account <label>``
creates one); recipients are created on first use. Custody and token failures
print their code and exit with 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import state_file
from .address import to_hex
from .chain import LocalChain
from .config import load_config
from .errors import CustodyError, TokenError
from .logging import setup_logging
from .version import __version__

app = typer.Typer(
    name="nfteth",
    add_completion=False,
    no_args_is_help=True,
    help="Token custody certificates: deposit whitelisted tokens, redeem certificates.",
)

console = Console()


class _Ctx:
    def __init__(self, state_path: Path) -> None:
        self.state_path = state_path


# ----------------- helpers -----------------


def _ctx(ctx: typer.Context) -> _Ctx:
    return ctx.obj


def _load(ctx: typer.Context) -> LocalChain:
    path = _ctx(ctx).state_path
    if not path.exists():
        console.print(f"[red]no state file at {path}; run 'nfteth init' first[/red]")
        raise typer.Exit(code=1)
    return state_file.load(path)


def _save(ctx: typer.Context, chain: LocalChain) -> None:
    state_file.save(chain, _ctx(ctx).state_path)


def _who(chain: LocalChain, ref: str) -> bytes:
    """Label (created on first use) or 0x-hex address."""
    if ref in chain.labels or ref.startswith(("0x", "0X")):
        return chain.resolve(ref)
    return chain.account(ref)


def _caller(chain: LocalChain, ref: str) -> bytes:
    """Known label or 0x-hex address. Callers are never created implicitly."""
    if ref in chain.labels or ref.startswith(("0x", "0X")):
        return chain.resolve(ref)
    console.print(f"[red]UnknownAccount[/red]: no account labelled {ref!r}; create it with 'nfteth account {ref}'")
    raise typer.Exit(code=1)


def _name(chain: LocalChain, addr: Optional[bytes]) -> str:
    if addr is None:
        return "-"
    label = chain.label_of(addr)
    return f"{label} ({to_hex(addr)})" if label else to_hex(addr)


def _fail(e: Exception) -> None:
    code = getattr(e, "code", type(e).__name__)
    message = getattr(e, "message", str(e))
    console.print(f"[red]{code}[/red]: {message}")
    raise typer.Exit(code=1)


# ----------------- commands -----------------


@app.callback()
def _main(
    ctx: typer.Context,
    state: Optional[Path] = typer.Option(None, "--state", help="State file (JSON)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log custody events (INFO)."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Render logs as JSON."),
) -> None:
    cfg = load_config()
    setup_logging(level="INFO" if verbose else "WARNING", log_format="json" if json_logs else None)
    ctx.obj = _Ctx(state or cfg.state_path)


@app.command()
def version() -> None:
    """Print the package version."""
    console.print(__version__)


@app.command()
def init(
    ctx: typer.Context,
    admin: str = typer.Option("admin", "--admin", help="Administrator account label."),
    name: Optional[str] = typer.Option(None, "--name"),
    symbol: Optional[str] = typer.Option(None, "--symbol"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing state file."),
) -> None:
    """Create a fresh local chain with a custody contract."""
    path = _ctx(ctx).state_path
    if path.exists() and not force:
        console.print(f"[red]{path} exists; use --force to overwrite[/red]")
        raise typer.Exit(code=1)
    chain = LocalChain()
    admin_addr = chain.account(admin)
    vault = chain.deploy_custody(admin_addr, name=name, symbol=symbol)
    _save(ctx, chain)
    console.print(f"custody {vault.symbol} deployed at {to_hex(vault.address)}; administrator {_name(chain, admin_addr)}")


@app.command()
def account(ctx: typer.Context, label: str) -> None:
    """Print (and remember) the address for an account label."""
    chain = _load(ctx)
    addr = chain.account(label)
    _save(ctx, chain)
    console.print(to_hex(addr))


@app.command("deploy-token")
def deploy_token(
    ctx: typer.Context,
    symbol: str,
    name: Optional[str] = typer.Option(None, "--name"),
    owner: str = typer.Option("admin", "--owner", help="Token owner (may mint)."),
    decimals: int = typer.Option(18, "--decimals"),
    label: Optional[str] = typer.Option(None, "--label"),
) -> None:
    """Deploy an in-memory fungible token."""
    chain = _load(ctx)
    try:
        owner_addr = _who(chain, owner)
        token = chain.deploy_token(name or symbol, symbol, owner_addr, decimals=decimals, label=label)
    except (CustodyError, TokenError, ValueError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"token {token.symbol} deployed at {to_hex(token.address)}")


@app.command()
def faucet(ctx: typer.Context, token: str, to: str, amount: int, caller: str = typer.Option("admin", "--caller")) -> None:
    """Mint test tokens (caller must be the token owner)."""
    chain = _load(ctx)
    try:
        tok = chain.token_at(chain.resolve(token))
        recipient = _who(chain, to)
        tok.mint(_caller(chain, caller), recipient, amount)
    except (CustodyError, TokenError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"minted {amount} {tok.symbol} to {_name(chain, recipient)}")


@app.command()
def approve(
    ctx: typer.Context,
    token: str,
    amount: int,
    caller: str = typer.Option(..., "--caller"),
    spender: Optional[str] = typer.Option(None, "--spender", help="Defaults to the custody contract."),
) -> None:
    """Set the caller's allowance for a spender (the custody contract by default)."""
    chain = _load(ctx)
    try:
        tok = chain.token_at(chain.resolve(token))
        spender_addr = _who(chain, spender) if spender else chain.custody().address
        tok.approve(_caller(chain, caller), spender_addr, amount)
    except (CustodyError, TokenError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"allowance of {_name(chain, spender_addr)} set to {amount}")


@app.command()
def whitelist(ctx: typer.Context, tokens: List[str], caller: str = typer.Option(..., "--caller")) -> None:
    """Accept tokens for deposit (administrator only)."""
    chain = _load(ctx)
    try:
        vault = chain.custody()
        listed = vault.set_accepted(_caller(chain, caller), [chain.labels.get(t, t) for t in tokens])
    except (CustodyError, TokenError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"accepted: {', '.join(_name(chain, t) for t in listed) or '-'}")


@app.command()
def deposit(ctx: typer.Context, token: str, amount: int, caller: str = typer.Option(..., "--caller")) -> None:
    """Deposit tokens and mint a certificate to the caller."""
    chain = _load(ctx)
    try:
        certificate_id = chain.custody().deposit(_caller(chain, caller), chain.resolve(token), amount)
    except (CustodyError, TokenError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"certificate {certificate_id} minted")


@app.command()
def redeem(ctx: typer.Context, certificate_id: int, caller: str = typer.Option(..., "--caller")) -> None:
    """Burn a certificate and receive its tokens."""
    chain = _load(ctx)
    try:
        record = chain.custody().redeem(_caller(chain, caller), certificate_id)
    except (CustodyError, TokenError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"certificate {certificate_id} redeemed: {record.amount} of {_name(chain, record.token)}")


@app.command("transfer-certificate")
def transfer_certificate(
    ctx: typer.Context, certificate_id: int, to: str, caller: str = typer.Option(..., "--caller")
) -> None:
    """Hand a certificate (and the right to redeem it) to another account."""
    chain = _load(ctx)
    try:
        vault = chain.custody()
        recipient = _who(chain, to)
        sender = _caller(chain, caller)
        vault.transfer_from(sender, vault.owner_of(certificate_id), recipient, certificate_id)
    except (CustodyError, TokenError) as e:
        _fail(e)
        return
    _save(ctx, chain)
    console.print(f"certificate {certificate_id} now held by {_name(chain, recipient)}")


@app.command()
def balance(ctx: typer.Context, token: str, who: str) -> None:
    """Token balance of an account or contract."""
    chain = _load(ctx)
    try:
        tok = chain.token_at(chain.resolve(token))
        console.print(tok.balance_of(_who(chain, who)))
    except (CustodyError, TokenError) as e:
        _fail(e)


@app.command()
def show(ctx: typer.Context) -> None:
    """Custody overview: administrator, whitelist, live certificates, solvency."""
    chain = _load(ctx)
    try:
        vault = chain.custody()
    except TokenError as e:
        _fail(e)
        return

    console.print(f"[bold]{vault.name}[/bold] ({vault.symbol}) at {to_hex(vault.address)}")
    console.print(f"administrator: {_name(chain, vault.owner())}")
    console.print(f"next id: {vault.next_id()}")

    wl = Table(title="Accepted tokens")
    wl.add_column("token")
    wl.add_column("held", justify="right")
    for t in vault.accepted():
        try:
            held = str(vault.adapter.held_balance(t))
        except TokenError:
            held = "-"
        wl.add_row(_name(chain, t), held)
    console.print(wl)

    certs = Table(title="Certificates")
    certs.add_column("id", justify="right")
    certs.add_column("holder")
    certs.add_column("token")
    certs.add_column("amount", justify="right")
    for tid, rec in sorted(vault.state.records.items()):
        certs.add_row(str(tid), _name(chain, vault.owner_of(tid)), _name(chain, rec.token), str(rec.amount))
    console.print(certs)

    try:
        vault.check_solvency()
    except (CustodyError, TokenError) as e:
        console.print(f"[red]solvency check failed[/red]: {e}")
        raise typer.Exit(code=1)
    console.print("[green]solvent[/green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
