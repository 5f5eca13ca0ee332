"""Command line entry point: catalog seeding and the development server."""

import typer
import uvicorn
from rich.console import Console
from sqlmodel import Session

from .application.catalog_service import ensure_catalog
from .application.configuration_service import ConfigurationService
from .config import settings
from .infrastructure.database.database import get_main_engine, init_db
from .logging_config import setup_logging

console = Console()

app = typer.Typer(
    name="configurator",
    help="""Custom Car Configurator

    Examples:
      configurator seed                 - create tables and seed an empty catalog
      configurator seed --reset         - drop everything, then seed
      configurator seed --with-samples  - also create the three demo cars
      configurator serve                - run the API with uvicorn
    """,
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def main():
    """Main entry point for the configurator CLI."""
    app()


@app.command()
def seed(
    reset: bool = typer.Option(
        False, "--reset", help="Drop all tables (cars included) before seeding"
    ),
    with_samples: bool = typer.Option(
        False, "--with-samples", help="Create the demo cars after the catalog"
    ),
) -> None:
    """Create the schema and load the feature catalog."""
    setup_logging()
    engine = get_main_engine()

    init_db(engine)

    with Session(engine) as session:
        if ensure_catalog(session, reset=reset):
            if reset:
                console.print("Dropped and recreated all tables", style="yellow")
            console.print("Catalog seeded", style="green")
        else:
            console.print("Catalog already present, nothing to seed", style="yellow")

        if with_samples:
            created = ConfigurationService(session).seed_sample_cars()
            console.print(f"Created {created} sample cars", style="green")


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Bind address"),
    port: int = typer.Option(settings.port, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the HTTP API."""
    uvicorn.run("configurator.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
