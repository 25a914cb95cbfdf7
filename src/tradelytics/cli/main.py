"""Tradelytics CLI main entry point."""

import click

from tradelytics import __version__
from tradelytics.cli.commands import report_command


@click.group()
@click.version_option(version=__version__)
def main():
    """Tradelytics - Trading Performance Analytics"""
    pass


# Register commands
main.add_command(report_command)


if __name__ == "__main__":
    main()
