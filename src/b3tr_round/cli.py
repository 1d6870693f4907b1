"""
B3trRound CLI

Operational tasks for the B3trRound allocation contract.

Commands:
  round:check-dependencies     - Show the contracts B3trRound is wired to
  round:current                - Current round ID
  round:previous               - Previous round ID
  round:start-new              - Start a new round and distribute allocations
  apps:all                     - All X-Apps for a round
  apps:unclaimed               - Unclaimed X-Apps for a round
  apps:unclaimed-previous      - Unclaimed X-Apps for the previous round
  apps:unclaimed-with-amounts  - Unclaimed X-Apps with claimable amounts
  apps:unclaimed-non-zero      - Unclaimed X-Apps with non-zero amounts
  apps:has-claimed             - Whether an X-App has claimed for a round
  claim:round                  - Claim allocations for a round
  claim:previous-round         - Claim allocations for the previous round
  deploy:round                 - Deploy B3trRound behind an ERC1967 proxy
  deploy:verify-mock           - Deploy VetDomainsVerifyMock
  networks                     - Show configured networks
  whoami                       - Show the signing address
"""

from __future__ import annotations

import logging
import sys

import click

from .config import DEFAULT_NETWORK, NETWORKS, load_env_file, load_network
from .errors import B3trRoundError
from .signer import load_signing_key
from .tasks import CliState, fail


# ============ Constants ============

VERSION = "0.1.0"


# ============ Banner ============


def _print_banner() -> None:
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("B 3 T R   R O U N D", fg="bright_white", bold=True)
        + click.style(f"  v{VERSION}", dim=True)
    )
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="b3tr-round")
@click.option(
    "--network",
    envvar="B3TR_NETWORK",
    default=DEFAULT_NETWORK,
    show_default=True,
    help="Network to operate on (mainnet, testnet, local-development)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic to stderr")
@click.pass_context
def cli(ctx: click.Context, network: str, verbose: bool) -> None:
    """B3trRound: round and allocation operations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    load_env_file()
    ctx.obj = CliState(network=network)

    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Commands ============

from .tasks.round import check_dependencies, current, previous, start_new
from .tasks.apps import (
    all_apps,
    has_claimed,
    unclaimed,
    unclaimed_non_zero,
    unclaimed_previous,
    unclaimed_with_amounts,
)
from .tasks.claim import claim_previous_round, claim_round
from .tasks.deploy import deploy_round, deploy_verify_mock

for _command in (
    check_dependencies,
    current,
    previous,
    start_new,
    all_apps,
    unclaimed,
    unclaimed_previous,
    unclaimed_with_amounts,
    unclaimed_non_zero,
    has_claimed,
    claim_round,
    claim_previous_round,
    deploy_round,
    deploy_verify_mock,
):
    cli.add_command(_command)


@cli.command()
def networks() -> None:
    """Show configured networks and contract addresses."""
    for name, config in NETWORKS.items():
        click.echo(
            click.style(f"  {name:<18}", fg="bright_white", bold=True)
            + click.style(config.contract_address, fg="cyan")
            + click.style(f"  {config.rpc_url} ({config.protocol})", dim=True)
        )


@cli.command()
@click.pass_obj
def whoami(state: CliState) -> None:
    """Show the address that signs transactions on the selected network."""
    try:
        account = load_signing_key(load_network(state.network))
    except B3trRoundError as exc:
        fail(exc)
    click.echo(f"Network: {state.network}")
    click.echo(f"Address: {account.address}")


# ============ Entry Points ============


def main() -> None:
    """B3trRound CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
