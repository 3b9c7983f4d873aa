"""scm-edit - reorder and renumber channels in a .scm channel list."""
from __future__ import annotations

import json
import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click

from scm_core.errors import SnapshotRowWarning

from .container import Container, ensure_backup, read_container, write_container
from .engine import (
    check_stores,
    compact_channels,
    export_snapshot,
    import_snapshot,
    list_channels,
    move_channel,
)
from .snapshot import read_snapshot, write_snapshot

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

SCM_PATH = click.Path(dir_okay=False, path_type=Path)
BACKUP_OPTION = click.option(
    "--backup/--no-backup",
    default=True,
    show_default=True,
    help="Copy the container to <file>.backup before the first write",
)


@contextmanager
def fail_closed() -> Iterator[None]:
    """Report any failure as a single FATAL line and exit 1."""
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", SnapshotRowWarning)
            try:
                yield
            finally:
                for w in caught:
                    click.echo(f"Warning: {w.message}")
    except (click.exceptions.Exit, click.Abort):
        raise
    except Exception as e:
        # No stack traces: one line that says why the command refused.
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)


def _persist(container: Container, modified: set[str], backup: bool) -> None:
    if not modified:
        return
    if backup:
        created = ensure_backup(container.path)
        if created is not None:
            click.echo(f"Backup created: {created}")
    write_container(container, modified)


@click.group()
def main():
    """Samsung channel list editor."""


@main.command("list")
@click.argument("path", type=SCM_PATH)
@click.option("--json", "as_json", is_flag=True, help="Print canonical JSON instead of a table")
def list_cmd(path: Path, as_json: bool):
    """List all channels."""
    with fail_closed():
        listings = list_channels(read_container(path).stores)

        if as_json:
            out = {
                listing.store: [
                    {
                        "number": ch.prog_nr,
                        "name": ch.name,
                        "index": ch.index,
                        "encrypted": ch.flags.encrypted,
                        "locked": ch.flags.locked,
                        "hidden": ch.flags.hidden,
                    }
                    for ch in listing.channels
                ]
                for listing in listings
            }
            click.echo(json.dumps(out, **CANONICAL_JSON_KW))
            return

        click.echo(f"Channel List: {path.name}")
        click.echo("=" * 60)
        for listing in listings:
            if not listing.channels:
                continue
            click.echo()
            click.echo(f"=== {listing.label} ({listing.store}) - {len(listing.channels)} channels ===")
            click.echo()
            for ch in listing.channels:
                flags = ("$" if ch.flags.encrypted else "") + ("L" if ch.flags.locked else "") + ("H" if ch.flags.hidden else "")
                suffix = f" [{flags}]" if flags else ""
                click.echo(f"  {ch.prog_nr:4}: {ch.name}{suffix}")


@main.command("move")
@click.argument("path", type=SCM_PATH)
@click.argument("from_nr", type=click.IntRange(min=1))
@click.argument("to_nr", type=click.IntRange(min=1))
@BACKUP_OPTION
def move_cmd(path: Path, from_nr: int, to_nr: int, backup: bool):
    """Move channel FROM_NR to position TO_NR."""
    with fail_closed():
        container = read_container(path)
        if from_nr == to_nr:
            click.echo("Source and target are the same. Nothing to do.")
            return

        result = move_channel(container.stores, from_nr, to_nr)
        click.echo(f"Found: {from_nr}: {result.name} in {result.slot.store}")
        _persist(container, result.modified, backup)
        click.echo(f"Successfully moved channel {from_nr} to position {to_nr}")


@main.command("compact")
@click.argument("path", type=SCM_PATH)
@click.argument("start_from", required=False, default=1, type=click.IntRange(min=1))
@BACKUP_OPTION
def compact_cmd(path: Path, start_from: int, backup: bool):
    """Renumber channels sequentially from START_FROM (default 1)."""
    with fail_closed():
        container = read_container(path)
        result = compact_channels(container.stores, start_from)
        if result.total == 0:
            click.echo("No channels found to compact")
            return

        for store, n in result.changed.items():
            click.echo(f"{store}: Renumbered {n} channels")
        _persist(container, result.modified, backup)
        click.echo(f"Successfully compacted {result.total} channels starting from position {start_from}")


@main.command("export")
@click.argument("path", type=SCM_PATH)
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
def export_cmd(path: Path, out: Path):
    """Export channels to a TSV file for editing."""
    with fail_closed():
        rows = export_snapshot(read_container(path).stores)
        write_snapshot(out, rows)

        click.echo(f"Exported {len(rows)} channels to {out}")
        click.echo()
        click.echo("Edit the file in a text editor:")
        click.echo("  - Reorder lines to change channel order")
        click.echo("  - The new channel number will be the line number (starting from 1)")
        click.echo("  - Do NOT modify the Source or RecordIndex columns")
        click.echo()
        click.echo(f'Then run: scm-edit import "{path}" "{out}"')


@main.command("import")
@click.argument("path", type=SCM_PATH)
@click.argument("tsv", type=click.Path(dir_okay=False, path_type=Path))
@BACKUP_OPTION
def import_cmd(path: Path, tsv: Path, backup: bool):
    """Apply the channel order of an edited TSV file."""
    with fail_closed():
        container = read_container(path)
        slots = read_snapshot(tsv)
        result = import_snapshot(container.stores, slots)

        for slot in result.unmatched:
            click.echo(f"Warning: {slot} is not an active channel")
        _persist(container, result.modified, backup)
        click.echo(f"Successfully updated {result.updated} channels from {tsv}")


@main.command("check")
@click.argument("path", type=SCM_PATH)
def check_cmd(path: Path):
    """Verify the checksum of every active channel record."""
    with fail_closed():
        report = check_stores(read_container(path).stores)
        bad = 0
        for store, indices in report.items():
            for i in indices:
                click.echo(f"{store}#{i}: checksum mismatch")
            bad += len(indices)

    if bad:
        click.echo(f"FAIL: {bad} record(s) with bad checksum")
        raise SystemExit(1)
    click.echo("PASS")


if __name__ == "__main__":
    main()
