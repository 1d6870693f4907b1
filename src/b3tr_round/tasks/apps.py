"""
X-App tasks - per-round app listings and claim status.

App ids are 32-byte handles printed as 0x-prefixed hex.
"""

from __future__ import annotations

from typing import Optional

import click

from ..errors import B3trRoundError
from ..utils import format_app_id, format_bytes32_array, format_ether, parse_app_id
from . import CliState, fail, open_client, round_id_option


def _validate_app_id(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        parse_app_id(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    return value


@click.command("apps:all")
@round_id_option
@click.pass_obj
def all_apps(state: CliState, round_id: int) -> None:
    """Get all X-Apps for a specific round."""
    try:
        apps = open_client(state).get_all_apps_for_round(round_id)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"All X-Apps for Round {round_id}:")
    click.echo(format_bytes32_array(apps))
    click.echo(f"Total: {len(apps)} apps")


@click.command("apps:unclaimed")
@round_id_option
@click.pass_obj
def unclaimed(state: CliState, round_id: int) -> None:
    """Get unclaimed X-Apps for a specific round."""
    try:
        apps = open_client(state).get_unclaimed_apps_for_round(round_id)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Unclaimed X-Apps for Round {round_id}:")
    click.echo(format_bytes32_array(apps))
    click.echo(f"Total: {len(apps)} unclaimed apps")


@click.command("apps:unclaimed-previous")
@click.pass_obj
def unclaimed_previous(state: CliState) -> None:
    """Get unclaimed X-Apps for the previous round."""
    try:
        client = open_client(state)
        round_id = client.get_previous_round_id()
        apps = client.get_unclaimed_apps_for_previous_round()
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Unclaimed X-Apps for previous Round {round_id}:")
    click.echo(format_bytes32_array(apps))
    click.echo(f"Total: {len(apps)} unclaimed apps")


@click.command("apps:unclaimed-with-amounts")
@round_id_option
@click.pass_obj
def unclaimed_with_amounts(state: CliState, round_id: int) -> None:
    """Get unclaimed X-Apps with their claimable amounts."""
    try:
        allocations = open_client(state).get_unclaimed_apps_with_amounts(round_id)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Unclaimed X-Apps with Amounts for Round {round_id}:")
    click.echo(f"{'AppID':<66} | Amount")
    click.echo(f"{'-' * 67}|{'-' * 17}")
    for app_id, amount in allocations.items():
        click.echo(f"{format_app_id(app_id)} | {format_ether(amount)} B3TR")
    click.echo("")
    click.echo(f"Total: {len(allocations)} unclaimed apps")


@click.command("apps:unclaimed-non-zero")
@round_id_option
@click.pass_obj
def unclaimed_non_zero(state: CliState, round_id: int) -> None:
    """Get unclaimed X-Apps with non-zero amounts."""
    try:
        apps = open_client(state).get_unclaimed_apps_with_non_zero_amounts(round_id)
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Unclaimed X-Apps with Non-Zero Amounts for Round {round_id}:")
    click.echo(format_bytes32_array(apps))
    click.echo(f"Total: {len(apps)} unclaimed apps with non-zero amounts")


@click.command("apps:has-claimed")
@round_id_option
@click.option("--app-id", required=True, callback=_validate_app_id, help="The X-App ID (0x + 64 hex)")
@click.pass_obj
def has_claimed(state: CliState, round_id: int, app_id: str) -> None:
    """Check if a specific X-App has claimed its allocation."""
    try:
        claimed = open_client(state).has_app_claimed(round_id, parse_app_id(app_id))
    except B3trRoundError as exc:
        fail(exc)

    click.echo(f"Has App {app_id} claimed for Round {round_id}: {str(claimed).lower()}")
