"""Management commands for the book marketplace backend."""

from __future__ import annotations

import logging
import time
from typing import Optional

import click

from bookmarket.core.exceptions import MarketplaceError
from bookmarket.core.logging_config import log_performance
from bookmarket.core.validation import validate_amount, validate_positive_id, validate_user
from bookmarket.db.session import create_tables
from bookmarket.domain.entities import User
from bookmarket.main import create_app
from bookmarket.services.inventory_service import InventoryManager
from bookmarket.services.user_service import UserService

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

_app = None


def get_app():
    """Create the Flask application once so commands share configuration."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("init_db")
def init_db() -> None:
    """Create all database tables."""
    with get_app().app_context():
        create_tables()
    click.echo("Database tables created.")


@cli.command("create_user")
@click.option("--username", required=True)
@click.option("--email", required=True)
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True)
@click.option("--phone", "phone_number", default=None)
@click.option("--funds", default="0", show_default=True)
def create_user(
    username: str,
    email: str,
    first_name: str,
    last_name: str,
    password: str,
    phone_number: Optional[str],
    funds: str,
) -> None:
    """Register a marketplace user."""
    with get_app().app_context():
        try:
            fields = validate_user(
                {
                    "username": username,
                    "email": email,
                    "first_name": first_name,
                    "last_name": last_name,
                    "password": password,
                    "phone_number": phone_number,
                    "funds": funds,
                }
            )
            password = fields.pop("password")
            user = UserService().add_user(User(**fields), password)
        except MarketplaceError as e:
            raise click.ClickException("; ".join(e.errors)) from e
    click.echo(f"Created user {user.username} (id={user.id}).")


@cli.command("add_funds")
@click.argument("user_id")
@click.argument("amount")
def add_funds(user_id: str, amount: str) -> None:
    """Top up USER_ID's balance by AMOUNT."""
    with get_app().app_context():
        try:
            user = UserService().add_funds(
                validate_positive_id(user_id, "user_id"), validate_amount(amount)
            )
        except MarketplaceError as e:
            raise click.ClickException("; ".join(e.errors)) from e
    click.echo(f"User {user.id} balance: {user.funds:.2f}")


@cli.command("inventory_report")
def inventory_report() -> None:
    """Print every book with its price, quantity and status."""
    started = time.perf_counter()
    with get_app().app_context():
        inventory = InventoryManager()
        books = inventory.list_books()

    click.echo(f"{len(books)}/{inventory.max_inventory_size} book records")
    for book in books:
        click.echo(
            f"{book.id:>4}  {book.isbn:<17} {book.title[:40]:<40} "
            f"{book.current_price:>9.2f}  x{book.quantity:<3} {book.status.value}"
        )
    log_performance(
        "inventory_report", (time.perf_counter() - started) * 1000, books=len(books)
    )


if __name__ == "__main__":
    cli()
