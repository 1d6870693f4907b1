"""
Deploy tasks - B3trRound implementation + ERC1967 proxy, and the
VetDomainsVerifyMock helper contract.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from ..client import RoundClient
from ..config import load_network
from ..deploy import deploy_and_initialize, deploy_verify_mock as _deploy_verify_mock
from ..deploy import load_ignition_parameters
from ..errors import B3trRoundError
from ..signer import load_signing_key
from ..utils import format_bytes32_array
from . import CliState, fail


@click.command("deploy:round")
@click.option("--x-allocation-pool", default=None, help="XAllocationPool address")
@click.option("--x-allocation-voting", default=None, help="XAllocationVoting address")
@click.option("--x2-earn-apps", default=None, help="X2EarnApps address")
@click.option("--emissions", default=None, help="Emissions address")
@click.option(
    "--parameters",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Ignition parameters JSON (B3trRoundModule section)",
)
@click.pass_obj
def deploy_round(
    state: CliState,
    x_allocation_pool: Optional[str],
    x_allocation_voting: Optional[str],
    x2_earn_apps: Optional[str],
    emissions: Optional[str],
    parameters: Optional[Path],
) -> None:
    """
    Deploy B3trRound using the proxy pattern.

    Dependency addresses default to the selected network's table; a
    parameters file and then explicit options override them.
    """
    click.echo("Deploying B3trRound contract using proxy pattern...")

    try:
        network = load_network(state.network)
        account = load_signing_key(network)
        dependencies = network.dependencies
        if parameters is not None:
            dependencies = load_ignition_parameters(parameters, dependencies)
    except B3trRoundError as exc:
        fail(exc)

    overrides = {
        "x_allocation_pool": x_allocation_pool,
        "x_allocation_voting": x_allocation_voting,
        "x2_earn_apps": x2_earn_apps,
        "emissions": emissions,
    }
    dependencies = replace(dependencies, **{k: v for k, v in overrides.items() if v})

    click.echo(f"Network: {network.name}")
    click.echo(f"Deploying with account: {account.address}")

    try:
        result = deploy_and_initialize(network, account, dependencies)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Implementation deployed to: {result.implementation_address}")
    click.echo(f"Proxy deployed to: {result.proxy_address}")
    click.secho("B3trRound (through proxy) initialized!", fg="green")

    # Smoke check through the proxy
    client = RoundClient(replace(network, contract_address=result.proxy_address))
    try:
        click.echo(f"Current round ID: {client.get_current_round_id()}")
        click.echo(f"Previous round ID: {client.get_previous_round_id()}")
        apps = client.get_unclaimed_apps_for_previous_round()
        click.echo(f"Unclaimed apps for previous round: {format_bytes32_array(apps)}")
    except B3trRoundError as exc:
        click.secho(f"WARNING: deployed, but calling the proxy failed: {exc}", fg="yellow")

    click.echo()
    click.secho(
        f"  Update the {network.name} contract address to {result.proxy_address} "
        "before running round/apps/claim tasks.",
        fg="cyan",
    )


@click.command("deploy:verify-mock")
@click.pass_obj
def deploy_verify_mock(state: CliState) -> None:
    """Deploy the VetDomainsVerifyMock contract."""
    click.echo("Deploying VetDomainsVerifyMock contract...")

    try:
        network = load_network(state.network)
        account = load_signing_key(network)
        result = _deploy_verify_mock(network, account)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"VetDomainsVerifyMock contract deployed to {result.contract_address}")
    click.echo(f"Deployer address (with DEFAULT_ADMIN_ROLE and ADMIN_ROLE): {account.address}")
