"""Export the current price list to PDF or PNG from the command line."""

import asyncio
import os
import sys

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import click
import structlog

from pricelist.application.services.export_tiler import ExportService
from pricelist.application.services.grouping import configure_collation
from pricelist.application.services.view_state import ViewStateStore
from pricelist.config import get_settings
from pricelist.core.logging import configure_logging
from pricelist.infrastructure.database import SessionLocal, engine
from pricelist.infrastructure.local_store import LocalStateStore
from pricelist.infrastructure.repositories.price_list_repository import SQLAlchemyPriceListRepository
from pricelist.infrastructure.seed import init_db

logger = structlog.get_logger(__name__)


async def run_export(fmt, search, category, show_hidden, export_dir):
    settings = get_settings()
    db = SessionLocal()
    try:
        init_db(engine, db)
        store = ViewStateStore(
            SQLAlchemyPriceListRepository(db),
            LocalStateStore(settings.LOCAL_STATE_PATH),
            exporter=ExportService(settings, export_dir=export_dir),
            settings=settings,
        )
        await store.load()
        store.set_search(search)
        store.set_category_filter(category)
        store.set_show_hidden(show_hidden)

        paths = []
        if fmt in ("pdf", "both"):
            paths.append(await store.export_pdf())
        if fmt in ("png", "both"):
            paths.append(await store.export_png())
        for notice in store.notices:
            click.echo(f"Export failed: {notice.message}", err=True)
        return [p for p in paths if p is not None], not store.notices
    finally:
        db.close()


@click.command()
@click.option("--format", "fmt", type=click.Choice(["pdf", "png", "both"]), default="pdf", show_default=True)
@click.option("--search", default="", help="Only rows whose product or category name contains this text.")
@click.option("--category", default="all", show_default=True, help="Exact category name, or 'all'.")
@click.option("--show-hidden", is_flag=True, help="Include hidden products.")
@click.option("--export-dir", default=None, help="Output directory (defaults to EXPORT_DIR).")
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level.")
def main(fmt, search, category, show_hidden, export_dir, verbose):
    configure_logging("DEBUG" if verbose else None)
    configure_collation()
    paths, ok = asyncio.run(run_export(fmt, search, category, show_hidden, export_dir))
    for path in paths:
        click.echo(f"Written {path}")
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
