"""Bundle command."""

import click
from pathlib import Path

from themepack_engine.bundle import bundle_theme
from themepack_engine.config import DEFAULT_BUNDLE_NAME
from themepack_engine.errors import ThemepackError, UsageError

from ..log import configure_logging


@click.command()
@click.option(
    "-d",
    "--dest",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory the bundle is written to",
)
@click.option("-n", "--name", default=DEFAULT_BUNDLE_NAME, show_default=True, help="Bundle file name")
@click.option("--lite", is_flag=True, help="Leave out theme sources, keep only runtime assets and parsed output")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=Path("."),
    help="Theme root containing config.json",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def bundle(dest: Path, name: str, lite: bool, project_dir: Path, verbose: bool):
    """Bundle a theme into a zip for upload."""
    configure_logging(verbose)

    click.echo(f"📦 Bundling theme: {project_dir.resolve()}")
    if lite:
        click.echo("  Lite mode: theme sources are left out")

    try:
        bundle_path = bundle_theme(project_dir, dest=dest, name=name, lite=lite)
    except UsageError as e:
        raise click.UsageError(str(e))
    except ThemepackError as e:
        click.echo(f"❌ Bundling failed: {e}", err=True)
        raise click.Abort()

    click.echo(f"✅ Bundle created: {bundle_path}")
