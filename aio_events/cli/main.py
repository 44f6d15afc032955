"""
main.py

Click-based CLI for the AIO events client.

Features:
- Publish CloudEvents and raw events
- Create, inspect and delete registrations
- YAML configuration with environment variable substitution
"""

import sys
from functools import update_wrapper
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.json import JSON as RichJSON
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..exceptions import AIOError
from ..factory import create_publish_client, create_registration_client
from ..management import Found, Registration, registration_input
from ..utils.config_manager import ConfigManager, Settings
from ..utils.logger import setup_logging

console = Console()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def load_settings(config_path: Optional[str]) -> Settings:
    """
    Load settings for a command.

    Raises:
        click.ClickException: If the configuration cannot be loaded
    """
    try:
        return ConfigManager.load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))


def pass_settings(f):
    """Load settings (and configure logging) when a command actually runs."""

    @click.pass_context
    def new_func(ctx: click.Context, *args, **kwargs):
        settings = load_settings(ctx.obj["config_path"])
        setup_logging(
            log_level=settings.logging.log_level,
            log_format=settings.logging.log_format,
            log_file=settings.logging.log_file
        )
        return ctx.invoke(f, settings, *args, **kwargs)

    return update_wrapper(new_func, f)


def parse_event_of_interest(value: str) -> Tuple[str, str]:
    """Split ``provider_id:event_code``."""
    provider_id, sep, event_code = value.partition(":")
    if not sep or not provider_id or not event_code:
        raise click.BadParameter(f"expected PROVIDER_ID:EVENT_CODE, got {value!r}")
    return provider_id, event_code


def read_data(data: Optional[str], data_file: Optional[str]) -> Optional[str]:
    if data is not None and data_file is not None:
        raise click.UsageError("Pass either DATA or --data-file, not both")
    if data_file is not None:
        with open(data_file, "r", encoding="utf-8") as f:
            return f.read()
    return data


def render_registration(registration: Registration) -> None:
    table = Table(title=f"Registration {registration.registration_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Name", registration.name)
    table.add_row("Description", registration.description or "")
    table.add_row("Client ID", registration.client_id or "")
    table.add_row("Delivery", registration.delivery_type.value)
    table.add_row("Status", registration.status.value)
    table.add_row("Integration", registration.integration_status.value)
    if registration.webhook_url:
        table.add_row("Webhook URL", registration.webhook_url)
    if registration.journal_url:
        table.add_row("Journal URL", registration.journal_url)
        table.add_row("Trace URL", registration.trace_url or "")
    table.add_row("Created", str(registration.created_date or ""))
    table.add_row("Updated", str(registration.updated_date or ""))
    for event in sorted(registration.events_of_interest, key=lambda e: (e.provider_id, e.event_code)):
        table.add_row("Event", f"{event.provider_id}:{event.event_code}")
    console.print(table)


# =============================================================================
# MAIN CLI GROUP
# =============================================================================

@click.group()
@click.version_option(version=__version__, prog_name="aio-events")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to settings.yaml (default: $AIO_EVENTS_CONFIG or config/settings.yaml)"
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]):
    """
    AIO events client CLI.

    Publish events and manage event registrations.
    """
    ctx.obj = {"config_path": config_path}


# =============================================================================
# PUBLISH COMMAND GROUP
# =============================================================================

@cli.group()
def publish():
    """Event publishing commands."""
    pass


@publish.command(name="event")
@click.argument("provider_id")
@click.argument("event_code")
@click.argument("data", required=False)
@click.option("--event-id", "-i", type=str, default=None, help="Event id (assigned by the service if omitted)")
@click.option("--data-file", "-f", type=click.Path(exists=True, dir_okay=False), default=None)
@pass_settings
def publish_event(
    settings: Settings,
    provider_id: str,
    event_code: str,
    data: Optional[str],
    event_id: Optional[str],
    data_file: Optional[str]
):
    """
    Publish a CloudEvent.

    DATA starting with "{" is sent as JSON, anything else as text.

    Example:
        aio-events publish event <provider-id> com.acme.order.created '{"id": 42}'
    """
    payload = read_data(data, data_file)
    try:
        with create_publish_client(settings) as client:
            with console.status("[bold cyan]Publishing CloudEvent..."):
                event = client.publish_cloud_event(provider_id, event_code, payload, event_id=event_id)
    except AIOError as e:
        raise click.ClickException(str(e))

    console.print(Panel("[green]CloudEvent published[/green]", title="Success", border_style="green"))
    console.print(RichJSON(event.to_json()))


@publish.command(name="raw")
@click.argument("provider_id")
@click.argument("event_code")
@click.argument("data", required=False)
@click.option("--data-file", "-f", type=click.Path(exists=True, dir_okay=False), default=None)
@pass_settings
def publish_raw(
    settings: Settings,
    provider_id: str,
    event_code: str,
    data: Optional[str],
    data_file: Optional[str]
):
    """Publish a raw event without a CloudEvent envelope."""
    payload = read_data(data, data_file)
    try:
        with create_publish_client(settings) as client:
            with console.status("[bold cyan]Publishing raw event..."):
                client.publish_raw_event(provider_id, event_code, payload)
    except AIOError as e:
        raise click.ClickException(str(e))

    console.print("[green]Raw event published[/green]")


# =============================================================================
# REGISTRATIONS COMMAND GROUP
# =============================================================================

@cli.group()
def registrations():
    """Registration lifecycle commands."""
    pass


@registrations.command(name="create")
@click.option("--name", "-n", required=True, help="Registration name")
@click.option("--description", "-d", default=None, help="Registration description")
@click.option(
    "--event",
    "-e",
    "events",
    multiple=True,
    required=True,
    help="Event of interest as PROVIDER_ID:EVENT_CODE (repeatable)"
)
@click.option("--webhook-url", "-w", default=None, help="Webhook URL (journal delivery if omitted)")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw registration JSON")
@pass_settings
def create_registration(
    settings: Settings,
    name: str,
    description: Optional[str],
    events: Tuple[str, ...],
    webhook_url: Optional[str],
    as_json: bool
):
    """
    Create a registration.

    Example:
        aio-events registrations create -n orders -e <provider-id>:com.acme.order.created
    """
    pairs = [parse_event_of_interest(value) for value in events]
    try:
        input_model = registration_input(
            name=name,
            events_of_interest=pairs,
            description=description,
            webhook_url=webhook_url
        )
        with create_registration_client(settings) as client:
            with console.status("[bold cyan]Creating registration..."):
                result = client.create_registration(input_model)
    except AIOError as e:
        raise click.ClickException(str(e))

    if not isinstance(result, Found):
        console.print("[yellow]The service did not create a registration[/yellow]")
        sys.exit(2)

    if as_json:
        console.print(RichJSON(result.registration.model_dump_json()))
    else:
        render_registration(result.registration)


@registrations.command(name="get")
@click.argument("registration_id")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the raw registration JSON")
@pass_settings
def get_registration(settings: Settings, registration_id: str, as_json: bool):
    """Show a registration."""
    try:
        with create_registration_client(settings) as client:
            result = client.find_by_id(registration_id)
    except AIOError as e:
        raise click.ClickException(str(e))

    if not isinstance(result, Found):
        console.print(f"[yellow]Registration not found:[/yellow] {registration_id}")
        sys.exit(2)

    if as_json:
        console.print(RichJSON(result.registration.model_dump_json()))
    else:
        render_registration(result.registration)


@registrations.command(name="delete")
@click.argument("registration_id")
@pass_settings
def delete_registration(settings: Settings, registration_id: str):
    """Delete a registration (succeeds if it is already gone)."""
    try:
        with create_registration_client(settings) as client:
            client.delete(registration_id)
    except AIOError as e:
        raise click.ClickException(str(e))

    console.print(f"[green]Registration deleted:[/green] {registration_id}")


# =============================================================================
# ENTRY POINT
# =============================================================================

def main():
    """Entry point for CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
