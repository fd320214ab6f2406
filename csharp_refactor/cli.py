# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for batch C# refactoring."""

import difflib
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from csharp_refactor.config import RefactorSettings, load_settings
from csharp_refactor.manager import RefactorManager
from csharp_refactor.protocol import RefactorPreview, RefactorType


@click.group()
@click.version_option(package_name="csharp-refactor")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file",
)
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    project_root: Optional[Path],
    verbose: bool,
) -> None:
    """Dependency constructor and async/sync refactorings for C# sources."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = RefactorSettings()
    if config_path is not None:
        try:
            settings = load_settings(config_path)
        except ValueError as e:
            raise click.ClickException(str(e))

    ctx.obj = RefactorManager(project_root=project_root, settings=settings)


def _target_options(func):
    func = click.option(
        "--no-backup", is_flag=True, help="Do not back up the file before writing"
    )(func)
    func = click.option("--dry-run", is_flag=True, help="Show the diff without writing")(func)
    func = click.option(
        "--column", type=click.IntRange(min=0), default=0, help="0-based column of the cursor"
    )(func)
    func = click.option(
        "--line", type=click.IntRange(min=1), required=True, help="1-based line of the cursor"
    )(func)
    func = click.argument(
        "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
    )(func)
    return func


def _show_diff(console: Console, manager: RefactorManager, preview: RefactorPreview) -> None:
    context_lines = manager.settings.diff_context_lines
    for path, (old_source, new_source) in manager.render_preview(preview).items():
        diff = difflib.unified_diff(
            old_source.splitlines(keepends=True),
            new_source.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
            n=context_lines,
        )
        diff_text = "".join(diff)
        if diff_text:
            syntax = Syntax(diff_text, "diff", theme="monokai", line_numbers=False)
            console.print(Panel(syntax, title="Diff", border_style="yellow"))


def _run(
    manager: RefactorManager,
    refactor_type: RefactorType,
    file: Path,
    line: int,
    column: int,
    dry_run: bool,
    no_backup: bool,
) -> None:
    console = Console(soft_wrap=True)

    preview = manager.preview(refactor_type, file, line, column)
    for warning in preview.warnings:
        console.print(f"[yellow]Warning:[/] {warning}")
    if not preview.is_valid:
        raise click.ClickException("; ".join(preview.errors))

    if not preview.has_changes:
        console.print("[dim]No changes[/]")
        return

    _show_diff(console, manager, preview)
    if dry_run:
        return

    result = manager.apply(preview.request, create_backup=False if no_backup else None)
    if not result.success:
        raise click.ClickException(result.error_message)

    console.print(f"[green]Applied {result.edits_applied} edit(s) to {file}[/]")
    for backup_path in result.backup_paths:
        console.print(f"[dim]Backup: {backup_path}[/]")


@cli.command()
@_target_options
@click.pass_obj
def constructor(
    manager: RefactorManager,
    file: Path,
    line: int,
    column: int,
    dry_run: bool,
    no_backup: bool,
) -> None:
    """Create or extend the constructor so every readonly field is injected."""
    _run(
        manager,
        RefactorType.GENERATE_DEPENDENCY_CONSTRUCTOR,
        file,
        line,
        column,
        dry_run,
        no_backup,
    )


@cli.command("to-sync")
@_target_options
@click.pass_obj
def to_sync(
    manager: RefactorManager,
    file: Path,
    line: int,
    column: int,
    dry_run: bool,
    no_backup: bool,
) -> None:
    """Convert the method under the cursor to a synchronous signature."""
    _run(manager, RefactorType.CONVERT_TO_SYNC, file, line, column, dry_run, no_backup)


@cli.command("to-async")
@_target_options
@click.pass_obj
def to_async(
    manager: RefactorManager,
    file: Path,
    line: int,
    column: int,
    dry_run: bool,
    no_backup: bool,
) -> None:
    """Convert the method under the cursor to an async Task signature."""
    _run(manager, RefactorType.CONVERT_TO_ASYNC, file, line, column, dry_run, no_backup)


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_obj
def suggest(manager: RefactorManager, files: tuple[Path, ...]) -> None:
    """List classes whose constructor does not inject every readonly field.

    Scans the whole project when no FILES are given.
    """
    console = Console(soft_wrap=True)

    if files:
        suggestions = {path: manager.suggest_refactorings(path) for path in files}
    else:
        suggestions = manager.suggest_refactorings_for_project()

    count = 0
    for path, file_suggestions in suggestions.items():
        for suggestion in file_suggestions:
            count += 1
            console.print(
                f"{path}:{suggestion.target.start_line}: "
                f"[cyan]{suggestion.refactor_type.value}[/] {suggestion.reason}"
            )

    if count == 0:
        console.print("[dim]No suggestions[/]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
