"""Command line interface (`cli-tool` console script)."""

from my_package.cli.main import app, run

__all__ = ["app", "run"]
