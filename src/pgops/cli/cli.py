"""CLI application for PostgreSQL operations tooling."""

import typer

from pgops.cli.commands.columns import columns_app
from pgops.cli.commands.grants import grants_app
from pgops.cli.commands.info import info_app
from pgops.cli.commands.schemas import schemas_app
from pgops.cli.common.exits import die
from pgops.cli.common.logs import configure_logging
from pgops.cli.common.options import VerboseOpt
from pgops.core.geo import coords_to_wkt

app = typer.Typer(
    help="pgops - PostgreSQL operations tooling",
    no_args_is_help=True,
)

app.add_typer(schemas_app, name="schemas", help="List / create / erase schemas.")
app.add_typer(columns_app, name="columns", help="Rewrite column data.")
app.add_typer(grants_app, name="grants", help="Read-only grants and event trigger.")
app.add_typer(info_app, name="info", help="Tables, columns, primary keys, views.")


@app.callback()
def _root(verbose: bool = VerboseOpt):
    """Configure logging for every command."""
    configure_logging(verbose)


@app.command("coords-to-wkt")
def coords_to_wkt_cmd(
    coords: str = typer.Argument(..., help="Google Maps coordinates 'lat, lon'"),
):
    """Convert Google Maps coordinates to a WGS84 WKT point."""
    try:
        typer.echo(coords_to_wkt(coords))
    except ValueError as exc:
        die(str(exc), code=2)


if __name__ == "__main__":
    app()
