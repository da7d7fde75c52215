"""
Maintenance commands for the network service
"""
import asyncio
from typing import Optional, Dict

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .infrastructure.database.connection import mongodb
from .infrastructure.database.repositories import (
    NotificationRepository, UserRepository, PostRepository, CommentRepository, RelationshipRepository
)
from .application.notification_service import NotificationService
from .application.seed import seed_sample_data, SAMPLE_PASSWORD

app = typer.Typer(help="Professional network service maintenance")
console = Console()


async def _prune(days: Optional[int]) -> int:
    await mongodb.connect()
    try:
        service = NotificationService(NotificationRepository(mongodb), UserRepository(mongodb))
        return await service.prune(days)
    finally:
        await mongodb.disconnect()


async def _ensure_indexes() -> None:
    # connect() creates the indexes
    await mongodb.connect()
    await mongodb.disconnect()


COLLECTIONS = ("users", "posts", "comments", "replies", "relationships", "notifications")


async def _seed(reset: bool) -> Optional[Dict[str, int]]:
    await mongodb.connect()
    try:
        if reset:
            for name in COLLECTIONS:
                await mongodb.db.drop_collection(name)
            await mongodb.create_indexes()
        return await seed_sample_data(
            UserRepository(mongodb),
            PostRepository(mongodb),
            CommentRepository(mongodb),
            RelationshipRepository(mongodb),
        )
    finally:
        await mongodb.disconnect()


@app.command("prune-notifications")
def prune_notifications(
    days: Optional[int] = typer.Option(
        None, "--days", min=0, help="Retention window in days (default from settings)"
    ),
):
    """Delete read notifications older than the retention window."""
    window = settings.NOTIFICATION_RETENTION_DAYS if days is None else days
    console.rule(f"[bold cyan]{settings.APP_NAME}")
    removed = asyncio.run(_prune(window))
    console.print(f"Removed [bold]{removed}[/bold] read notifications older than {window} days")


@app.command("ensure-indexes")
def ensure_indexes():
    """Create the MongoDB indexes the service relies on."""
    asyncio.run(_ensure_indexes())
    console.print(f"Indexes ensured on database [bold]{settings.MONGODB_DATABASE}[/bold]")


@app.command("seed")
def seed(
    reset: bool = typer.Option(False, "--reset", help="Drop all collections before seeding"),
):
    """Load sample users, posts, connections and comments."""
    if reset:
        typer.confirm(f"Drop every collection in {settings.MONGODB_DATABASE}?", abort=True)
    counts = asyncio.run(_seed(reset))
    if counts is None:
        console.print("[yellow]Sample data already present[/yellow] (use --reset to reload)")
        return

    table = Table(title="Sample data")
    table.add_column("Records")
    table.add_column("Count", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)
    console.print(f"Sample users sign in with password [bold]{SAMPLE_PASSWORD}[/bold]")


def main():
    app()


if __name__ == "__main__":
    main()
