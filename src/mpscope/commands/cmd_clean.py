"""Delete unused files from disk."""

from __future__ import annotations

import logging
import os

import click

from mpscope.commands.resolve import run_analysis
from mpscope.output.formatter import json_envelope, to_json

log = logging.getLogger(__name__)


@click.command("clean")
@click.option("--write", is_flag=True, help="Actually delete files (default is a dry run)")
@click.pass_context
def clean(ctx, write):
    """Delete unused files.

    Without --write only the files that would be deleted are listed.
    Files that vanished since the scan are skipped.
    """
    json_mode = ctx.obj.get("json") if ctx.obj else False
    result = run_analysis(ctx)

    deleted, missing, errors = [], [], []
    for path in result.unused_files:
        rel = result.relative(path)
        if not os.path.exists(path):
            missing.append(rel)
            continue
        if not write:
            deleted.append(rel)
            continue
        try:
            os.remove(path)
        except OSError as exc:
            log.warning("Could not delete %s: %s", rel, exc)
            errors.append(rel)
        else:
            deleted.append(rel)

    if json_mode:
        click.echo(to_json(json_envelope(
            "clean",
            summary={"dry_run": not write, "deleted": len(deleted),
                     "missing": len(missing), "errors": len(errors)},
            files=deleted,
            missing=missing,
            errors=errors,
        )))
        return

    verb = "Deleted" if write else "Would delete"
    click.echo(f"{verb} {len(deleted)} file(s):")
    for rel in deleted:
        click.echo(f"  {rel}")
    if missing:
        click.echo(f"Skipped {len(missing)} file(s) already gone")
    if errors:
        click.echo(f"Failed to delete {len(errors)} file(s)")
    if not write and deleted:
        click.echo("Dry run: pass --write to delete.")
