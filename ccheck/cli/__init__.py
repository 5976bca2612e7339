"""
ccheck/cli/__init__.py

Entry point for the `ccheck` terminal command, registered in
pyproject.toml as:

    [project.scripts]
    ccheck = "ccheck.cli:cli"
"""

from ccheck.cli.check import check_command

cli = check_command

__all__ = ["cli"]
