"""Command-line interface for Medicart."""

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, NoReturn, Optional

import typer

from medicart.app import MedicartApp, create_app
from medicart.config import get_settings
from medicart.errors import ValidationError
from medicart.events import Topic
from medicart.logging_utils import configure_logging
from medicart.models.cart import CartItem
from medicart.models.reminder import DEFAULT_FORM_TIME
from medicart.services.cart import compute_totals

app = typer.Typer(help="Medicart medication cart and reminder commands.")
cart_app = typer.Typer(help="Inspect and change the medication cart.")
reminders_app = typer.Typer(help="Inspect and change medication reminders.")
app.add_typer(cart_app, name="cart")
app.add_typer(reminders_app, name="reminders")


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)


@contextmanager
def _open() -> Iterator[MedicartApp]:
    """Yield the app for one command and close its store afterwards."""
    medicart = create_app()
    try:
        yield medicart
    finally:
        medicart.close()


def _fail(exc: ValidationError) -> NoReturn:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2))


@cart_app.command("show")
def cart_show(as_json: bool = typer.Option(False, "--json", help="Emit JSON.")) -> None:
    """List cart items and the order summary."""

    with _open() as medicart:
        items = medicart.cart.items()
    totals = compute_totals(items).display()
    if as_json:
        _echo_json({"items": [item.model_dump(mode="json") for item in items], "totals": totals})
        return

    if not items:
        typer.echo("Your cart is empty.")
        return
    for index, item in enumerate(items):
        typer.echo(
            f"[{index}] {item.name} {item.dosage} x{item.quantity} "
            f"@ ${item.price:.2f} ({item.frequency})"
        )
    typer.echo(f"Subtotal ${totals['subtotal']}  Tax ${totals['tax']}  Total ${totals['total']}")


@cart_app.command("add")
def cart_add(path: Path = typer.Argument(..., help="JSON file holding an array of medications.")) -> None:
    """Add medications from a JSON file; names already in the cart are skipped."""

    with path.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    try:
        candidates = [CartItem.model_validate(record) for record in payload]
    except ValueError as exc:
        typer.secho(f"Error: invalid medication record: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    with _open() as medicart:
        added = medicart.cart.add_medications(candidates)
    typer.echo(f"Added {len(added)} medication(s).")


@cart_app.command("inc")
def cart_increment(
    index: int = typer.Argument(..., help="Cart position."),
    by: int = typer.Option(1, "--by", min=1, help="Units to add."),
) -> None:
    """Increase the quantity of a cart item."""

    with _open() as medicart:
        item = medicart.cart.update_quantity(index, by)
    typer.echo(f"{item.name}: quantity {item.quantity}" if item else "No such cart item.")


@cart_app.command("dec")
def cart_decrement(
    index: int = typer.Argument(..., help="Cart position."),
    by: int = typer.Option(1, "--by", min=1, help="Units to remove."),
) -> None:
    """Decrease the quantity of a cart item (never below 1)."""

    with _open() as medicart:
        item = medicart.cart.update_quantity(index, -by)
    typer.echo(f"{item.name}: quantity {item.quantity}" if item else "No such cart item.")


@cart_app.command("remove")
def cart_remove(index: int = typer.Argument(..., help="Cart position.")) -> None:
    """Remove a cart item."""

    with _open() as medicart:
        removed = medicart.cart.remove_item(index)
    typer.echo(f"Removed {removed.name}." if removed else "No such cart item.")


@cart_app.command("clear")
def cart_clear() -> None:
    """Empty the cart."""

    with _open() as medicart:
        medicart.cart.clear()
    typer.echo("Cart cleared.")


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Prescription image or PDF."),
    content_type: Optional[str] = typer.Option(None, "--content-type", help="Override the detected type."),
) -> None:
    """Read a prescription and add the medications found to the cart."""

    try:
        with _open() as medicart:
            result = medicart.uploader.upload(
                path.name,
                content_type=content_type,
                size_bytes=path.stat().st_size,
            )
    except ValidationError as exc:
        _fail(exc)
    typer.echo(f"Found {len(result.extracted)} medication(s), {len(result.added)} added to cart:")
    for item in result.extracted:
        typer.echo(f"  {item.name} {item.dosage} - {item.frequency}")


@reminders_app.command("show")
def reminders_show(as_json: bool = typer.Option(False, "--json", help="Emit JSON.")) -> None:
    """List reminders."""

    with _open() as medicart:
        reminders = medicart.reminders.items()
    if as_json:
        _echo_json([reminder.model_dump(mode="json") for reminder in reminders])
        return
    if not reminders:
        typer.echo("No reminders yet.")
        return
    for reminder in reminders:
        state = "on " if reminder.enabled else "off"
        typer.echo(
            f"{reminder.id} [{state}] {reminder.medication} {reminder.dosage} "
            f"({reminder.frequency}) at {', '.join(reminder.times)}"
        )


@reminders_app.command("add")
def reminders_add(
    medication: str = typer.Option("", "--medication", "-m", help="Medication name."),
    dosage: str = typer.Option("", "--dosage", "-d", help="Dosage, e.g. 100mg."),
    frequency: str = typer.Option("Daily", "--frequency", "-f", help="Frequency label."),
    times: Optional[List[str]] = typer.Option(None, "--time", "-t", help="HH:MM, repeatable."),
) -> None:
    """Create a reminder."""

    draft = {
        "medication": medication,
        "dosage": dosage,
        "frequency": frequency,
        "times": times or [DEFAULT_FORM_TIME],
    }
    try:
        with _open() as medicart:
            reminder = medicart.reminders.create(draft)
    except ValidationError as exc:
        _fail(exc)
    typer.echo(f"Reminder {reminder.id} set for {reminder.medication}.")


@reminders_app.command("from-cart")
def reminders_from_cart() -> None:
    """Create default reminders for every medication in the cart."""

    with _open() as medicart:
        added = medicart.reminders.create_from_cart(medicart.cart.items())
    typer.echo(f"Created {len(added)} reminder(s).")


@reminders_app.command("toggle")
def reminders_toggle(reminder_id: str = typer.Argument(..., help="Reminder id.")) -> None:
    """Enable or disable a reminder."""

    with _open() as medicart:
        reminder = medicart.reminders.toggle(reminder_id)
    if reminder is None:
        typer.echo("No such reminder.")
        return
    typer.echo(f"{reminder.medication} {'enabled' if reminder.enabled else 'disabled'}.")


@reminders_app.command("edit")
def reminders_edit(
    reminder_id: str = typer.Argument(..., help="Reminder id."),
    medication: Optional[str] = typer.Option(None, "--medication", "-m"),
    dosage: Optional[str] = typer.Option(None, "--dosage", "-d"),
    frequency: Optional[str] = typer.Option(None, "--frequency", "-f"),
    times: Optional[List[str]] = typer.Option(None, "--time", "-t", help="Replace schedule, repeatable."),
) -> None:
    """Change fields of a reminder."""

    fields = {
        name: value
        for name, value in (("medication", medication), ("dosage", dosage), ("frequency", frequency))
        if value is not None
    }
    if times:
        fields["times"] = times
    try:
        with _open() as medicart:
            reminder = medicart.reminders.update(reminder_id, fields)
    except ValidationError as exc:
        _fail(exc)
    typer.echo("Reminder updated." if reminder else "No such reminder.")


@reminders_app.command("add-time")
def reminders_add_time(
    reminder_id: str = typer.Argument(..., help="Reminder id."),
    at: str = typer.Argument("12:00", help="HH:MM"),
) -> None:
    """Add a time to a reminder's schedule."""

    try:
        with _open() as medicart:
            reminder = medicart.reminders.add_time(reminder_id, at)
    except ValidationError as exc:
        _fail(exc)
    typer.echo(f"Times: {', '.join(reminder.times)}" if reminder else "No such reminder.")


@reminders_app.command("remove-time")
def reminders_remove_time(
    reminder_id: str = typer.Argument(..., help="Reminder id."),
    index: int = typer.Argument(..., help="Position in the schedule."),
) -> None:
    """Remove a time from a reminder's schedule; the last time always stays."""

    with _open() as medicart:
        reminder = medicart.reminders.remove_time(reminder_id, index)
    typer.echo(f"Times: {', '.join(reminder.times)}" if reminder else "No such reminder.")


@reminders_app.command("delete")
def reminders_delete(reminder_id: str = typer.Argument(..., help="Reminder id.")) -> None:
    """Delete a reminder."""

    with _open() as medicart:
        deleted = medicart.reminders.delete(reminder_id)
    typer.echo("Reminder deleted." if deleted else "No such reminder.")


@app.command()
def badges() -> None:
    """Print the navigation badge counts."""

    with _open() as medicart, medicart.header_badges().mount() as header:
        typer.echo(f"cart={header.counts.cart} reminders={header.counts.reminders}")


@app.command()
def watch(
    once: bool = typer.Option(False, "--once", help="Poll twice and exit."),
    poll_interval: Optional[float] = typer.Option(None, "--poll-interval", help="Seconds between polls."),
) -> None:
    """Follow badge counts as other processes change the store."""

    with _open() as medicart, medicart.header_badges().mount() as header:
        watcher = medicart.storage_watcher(poll_interval)

        def _report(topic: Topic) -> None:
            typer.echo(f"{topic.value}: cart={header.counts.cart} reminders={header.counts.reminders}")

        with medicart.bus.subscription(Topic.STORAGE_CHANGED, _report):
            typer.echo(f"cart={header.counts.cart} reminders={header.counts.reminders}")
            if once:
                watcher.poll_once()
                watcher.poll_once()
                return

            typer.echo("Watching for changes. Press Ctrl+C to stop.")
            watcher.start()
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                typer.echo("Stopping watcher…")
                watcher.stop()


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``medicart`` console script."""
    app(prog_name="medicart", args=argv)


if __name__ == "__main__":
    main()
