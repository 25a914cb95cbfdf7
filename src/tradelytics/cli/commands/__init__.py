"""Commands __init__ - exports all commands."""

from tradelytics.cli.commands.report import report_command

__all__ = ["report_command"]
