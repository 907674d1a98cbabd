"""Root CLI application for simlaunch."""

import typer

from simlaunch import __version__
from simlaunch.cli import simulator

app = typer.Typer(
    name="simlaunch",
    help="Launch apps in the mobile simulator and report how they finished.",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(simulator.app, name="simulator", help="Launch and stop the simulator")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"simlaunch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """simlaunch - mobile simulator launch orchestrator."""
    pass


if __name__ == "__main__":
    app()
