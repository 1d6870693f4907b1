"""
Round tasks - round ids, contract wiring, and starting a new round.
"""

from __future__ import annotations

import click

from ..client import NO_PREVIOUS_ROUND
from ..errors import B3trRoundError
from . import CliState, fail, open_client


@click.command("round:check-dependencies")
@click.pass_obj
def check_dependencies(state: CliState) -> None:
    """Check the contract dependencies."""
    try:
        client = open_client(state)
        deps = client.check_dependencies()
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Emissions contract address: {deps.emissions}")
    click.echo(f"XAllocationPool contract address: {deps.x_allocation_pool}")
    click.echo(f"XAllocationVoting contract address: {deps.x_allocation_voting}")
    click.echo(f"X2EarnApps contract address: {deps.x2_earn_apps}")


@click.command("round:current")
@click.pass_obj
def current(state: CliState) -> None:
    """Get the current round ID."""
    try:
        round_id = open_client(state).get_current_round_id()
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Current Round ID: {round_id}")


@click.command("round:previous")
@click.pass_obj
def previous(state: CliState) -> None:
    """Get the previous round ID."""
    try:
        round_id = open_client(state).get_previous_round_id()
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Previous Round ID: {round_id}")
    if round_id == NO_PREVIOUS_ROUND:
        click.secho("  (no previous round yet)", dim=True)


@click.command("round:start-new")
@click.pass_obj
def start_new(state: CliState) -> None:
    """Start a new round and distribute allocations."""
    try:
        client = open_client(state, signing=True)
        click.echo("Starting new round and distributing allocations...")
        result = client.start_new_round_and_distribute_allocations()
        click.echo(f"Transaction hash: {result.tx_hash}")
        click.secho("Transaction confirmed!", fg="green")

        round_id = client.get_current_round_id()
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"New round started. Current round is now: {round_id}")
