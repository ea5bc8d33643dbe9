"""CLI entry point for cargo-jump.

Installed as `cargo-jump`, so Cargo picks it up as the `cargo jump`
subcommand (Cargo passes "jump" as the first argument).
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from cargo_jump.errors import CargoJumpError
from cargo_jump.models import RunConfig
from cargo_jump.pipeline import format_report, run_bump
from cargo_jump.shell import step


@click.group()
@click.version_option(package_name="cargo-jump")
def cli() -> None:
    """Bump the version of workspace packages changed since a tag."""


@cli.command()
@click.argument("new_version")
@click.option("--old-tag", default=None, help="Old git tag for comparison.")
@click.option("--dry-run", is_flag=True, help="Don't modify anything.")
@click.option(
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory holding the workspace's root manifest.",
)
@click.option(
    "--strict-roots",
    is_flag=True,
    help="Reject packages nested inside another package's directory.",
)
@click.option(
    "--no-lockfile",
    is_flag=True,
    help="Don't refresh the lockfile after writing manifests.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def jump(
    new_version: str,
    old_tag: str | None,
    dry_run: bool,
    workspace: Path,
    strict_roots: bool,
    no_lockfile: bool,
    verbose: bool,
) -> None:
    """Set NEW_VERSION on every package changed since --old-tag.

    Packages depending on a changed package are bumped too. Without
    --old-tag every workspace package is bumped.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RunConfig(
            new_version=new_version,
            old_tag=old_tag,
            dry_run=dry_run,
            workspace_root=workspace,
            allow_nested_roots=not strict_roots,
            update_lockfile=not no_lockfile,
        )
    except ValidationError as exc:
        raise click.BadParameter(
            "; ".join(err["msg"] for err in exc.errors())
        ) from exc

    try:
        result = run_bump(config)
    except CargoJumpError as exc:
        raise click.ClickException(str(exc)) from exc

    if not result.outcomes:
        return

    step("Summary")
    for line in format_report(result):
        click.echo(line)

    if not result.ok:
        raise SystemExit(1)
