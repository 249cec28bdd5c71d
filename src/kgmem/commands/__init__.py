"""Subcommand modules for kgmem.

Provides register_commands() which uses deferred imports to keep
``kgmem --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group.

    3 groups (entity, relation, observation) + 4 standalone commands.
    """
    # --- Groups ---
    from kgmem.commands.entity import entity
    from kgmem.commands.observation import observation
    from kgmem.commands.relation import relation

    cli.add_command(entity)
    cli.add_command(relation)
    cli.add_command(observation)

    # --- Standalone commands ---
    from kgmem.commands.graph import open_cmd, read, search
    from kgmem.commands.serve import serve

    cli.add_command(read)
    cli.add_command(search)
    cli.add_command(open_cmd)
    cli.add_command(serve)
