"""
Tasks - Command implementations for the B3trRound CLI.

Each module groups the commands of one namespace:
- round:  round ids, dependency check, starting a new round
- apps:   X-App listings and claim status per round
- claim:  claiming allocations
- deploy: implementation + proxy deployment
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import NoReturn

import click

from ..client import RoundClient
from ..config import load_network
from ..errors import B3trRoundError
from ..signer import load_signing_key

# Round ids are uint256 on chain
MAX_UINT256 = 2**256 - 1


@dataclass(frozen=True)
class CliState:
    network: str


def fail(exc: B3trRoundError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red")
    sys.exit(exc.exit_code)


def open_client(state: CliState, signing: bool = False) -> RoundClient:
    """
    Resolve the network and bind a client to its contract address.

    Raises ConfigurationError before any remote call when the network is
    unknown or signing credentials are missing.
    """
    network = load_network(state.network)
    account = load_signing_key(network) if signing else None

    click.echo(f"Network: {network.name}")
    click.echo(f"Using contract address: {network.contract_address}")
    if account is not None:
        click.echo(f"Signer: {account.address}")

    return RoundClient(network, account=account)


def round_id_option(func):
    return click.option(
        "--round-id",
        required=True,
        type=click.IntRange(min=0, max=MAX_UINT256),
        help="The round ID",
    )(func)
