"""CLI commands for RSVP reminders and notification channels."""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import UUID

import typer

from src.access.roles import can_manage_role
from src.config.logging import setup_logging
from src.config.settings import settings
from src.guests.dtos import EventDTO
from src.notifications.container import get_notification_services
from src.notifications.errors import NotificationError
from src.reminders.repository import SqlReminderRepository
from src.reminders.scheduler import ReminderScheduler

app = typer.Typer(help="CLI commands for RSVP reminders and notifications")


@app.command()
def run_reminders():
    """Run one reminder pass now, the same as the daily scheduler does."""
    setup_logging()
    services = get_notification_services()
    scheduler = ReminderScheduler(
        repository=SqlReminderRepository(),
        email_service=services.email_service,
        sms_service=services.sms_service,
        max_days_ahead=settings.reminder_max_days_ahead,
        max_hours_ahead=settings.reminder_max_hours_ahead,
    )
    summary = asyncio.run(scheduler.run_once())

    typer.secho("Reminder run finished!", fg=typer.colors.GREEN)
    typer.secho(f"  Events checked: {summary.events_checked}", fg=typer.colors.BLUE)
    typer.secho(f"  Emails sent: {summary.emails_sent}", fg=typer.colors.CYAN)
    typer.secho(f"  SMS sent: {summary.sms_sent}", fg=typer.colors.CYAN)
    if summary.errors:
        typer.secho(f"  Errors: {summary.errors}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def send_test_sms(
    to: str = typer.Argument(..., help="Phone number to text"),
    message: str = typer.Option(
        "This is a test message from OwnRSVP.",
        "--message",
        "-m",
        help="Text to send",
    ),
):
    """Send a text through whichever SMS provider is configured."""
    setup_logging()

    async def _send():
        sms_service = get_notification_services().sms_service
        provider = await sms_service.get_provider()
        typer.secho(f"Provider: {provider.name}", fg=typer.colors.BLUE)
        return await provider.send_sms(to, message)

    result = asyncio.run(_send())
    if result.sent:
        typer.secho(f"SMS sent! Message ID: {result.message_id}", fg=typer.colors.GREEN)
    else:
        typer.secho(f"SMS not sent: {result.reason}", fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def send_test_email(
    to: str = typer.Argument(..., help="Address to send the test reminder to"),
):
    """Send a sample reminder email to check the email configuration."""
    setup_logging()
    event = EventDTO(
        uuid=UUID(int=0),
        title="Test Event",
        date=datetime.now(UTC) + timedelta(days=2),
        host_id=UUID(int=0),
        location="Somewhere nice",
    )

    async def _send():
        email_service = get_notification_services().email_service
        await email_service.send_reminder(
            to_address=to,
            guest_name="Test Guest",
            event=event,
            rsvp_token="test-token",
        )

    try:
        asyncio.run(_send())
    except NotificationError as e:
        typer.secho(f"Email not sent: {e}", fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho(f"Test email sent to {to}!", fg=typer.colors.GREEN)


@app.command()
def show_role(
    user_id: str = typer.Argument(..., help="User UUID"),
    event_id: str = typer.Argument(..., help="Event UUID"),
):
    """Show what a user may do on an event."""

    async def _resolve():
        access = get_notification_services().access_read_model
        return await access.role_of(UUID(user_id), UUID(event_id))

    try:
        role = asyncio.run(_resolve())
    except ValueError:
        typer.secho("Invalid UUID", fg=typer.colors.RED)
        raise typer.Exit(1)

    if role is None:
        typer.secho("No access", fg=typer.colors.YELLOW)
        return

    typer.secho(f"Role: {role.value}", fg=typer.colors.GREEN)
    can_manage = "yes" if can_manage_role(role) else "no"
    typer.secho(f"Can manage: {can_manage}", fg=typer.colors.BLUE)


if __name__ == "__main__":
    app()
