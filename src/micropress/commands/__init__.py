"""Subcommands. Each module is imported only when the group is built."""

from __future__ import annotations

import click


def register_commands(group: click.Group) -> None:
    from micropress.commands.serve import serve

    group.add_command(serve)
