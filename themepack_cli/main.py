"""CLI entrypoint."""

import click

from themepack_engine import __version__

from .commands.bundle import bundle


@click.group()
@click.version_option(version=__version__, prog_name="themepack")
def cli():
    """themepack CLI - Bundle a theme into a zip for upload."""
    pass


cli.add_command(bundle)


if __name__ == "__main__":
    cli()
