"""
Claim tasks - claim X-App allocations for a round.

The contract decides which rounds are still claimable and which apps are
eligible. A round with nothing to claim may confirm as a no-op or revert;
either outcome is reported as the contract returns it.
"""

from __future__ import annotations

import click

from ..errors import B3trRoundError
from . import CliState, fail, open_client, round_id_option


@click.command("claim:round")
@round_id_option
@click.pass_obj
def claim_round(state: CliState, round_id: int) -> None:
    """Claim allocations for all unclaimed X-Apps for a specific round."""
    try:
        client = open_client(state, signing=True)
        click.echo(f"Claiming allocations for Round {round_id}...")
        result = client.claim_allocations_for_round(round_id)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Transaction hash: {result.tx_hash}")
    click.secho("Transaction confirmed!", fg="green")
    click.echo(f"Successfully claimed allocations for Round {round_id}")


@click.command("claim:previous-round")
@click.pass_obj
def claim_previous_round(state: CliState) -> None:
    """Claim allocations for the previous round."""
    try:
        client = open_client(state, signing=True)
        round_id = client.get_previous_round_id()
        click.echo(f"Claiming allocations for previous round ({round_id})...")
        _, result = client.claim_allocations_for_previous_round(round_id)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Transaction hash: {result.tx_hash}")
    click.secho("Transaction confirmed!", fg="green")
    click.echo(f"Successfully claimed allocations for the previous round ({round_id})")
