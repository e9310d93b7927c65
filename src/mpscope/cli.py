"""Click CLI entry point with lazy-loaded subcommands."""

import logging

import click


# Lazy-loading command group: imports command modules only when invoked.
# This avoids importing networkx and tree-sitter for `--help`.
_COMMANDS = {
    "unused": ("mpscope.commands.cmd_unused", "unused"),
    "clean":  ("mpscope.commands.cmd_clean",  "clean"),
    "graph":  ("mpscope.commands.cmd_graph",  "graph_cmd"),
}

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


class LazyGroup(click.Group):
    """A Click group that lazy-loads command modules on first access."""

    def list_commands(self, ctx):
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx, cmd_name):
        if cmd_name not in _COMMANDS:
            return None
        module_path, attr_name = _COMMANDS[cmd_name]
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, attr_name)


@click.group(cls=LazyGroup)
@click.version_option(package_name="mpscope")
@click.option("--project", "project", default=".", show_default=True,
              type=click.Path(file_okay=False), help="Project root directory")
@click.option("--miniapp-root", default=None, help="Source-tree root, relative to the project")
@click.option("--entry-file", default=None, help="Explicit entry file, relative to the miniapp root")
@click.option("--types", default=None, help="Comma-separated file extensions to scan")
@click.option("--exclude", multiple=True, help="Glob of files to skip (repeatable)")
@click.option("--essential", multiple=True, help="File that always counts as used (repeatable)")
@click.option("--include-assets", is_flag=True, help="Also report unreferenced images")
@click.option("--json", "json_mode", is_flag=True, help="Output in JSON format")
@click.option("-v", "--verbose", count=True, help="-v for progress, -vv for resolution detail")
@click.pass_context
def cli(ctx, project, miniapp_root, entry_file, types, exclude, essential,
        include_assets, json_mode, verbose):
    """mpscope: find files a mini-program never loads."""
    logging.basicConfig(
        level=_LOG_LEVELS.get(verbose, logging.DEBUG),
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_mode
    ctx.obj["project"] = project
    ctx.obj["options"] = {
        "miniappRoot": miniapp_root,
        "entryFile": entry_file,
        "types": types,
        "exclude": list(exclude),
        "essentialFiles": list(essential),
        "includeAssets": include_assets,
    }
