"""Entry point for logfocus CLI."""

import json
import logging
from pathlib import Path

import rich_click as click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from logfocus.core.cache import LineRange
from logfocus.core.color import to_hex
from logfocus.core.config import Config, ConfigError, ConfigLoader
from logfocus.core.matcher import InvalidPatternError
from logfocus.core.project import Project, ProjectError
from logfocus.core.storage import StorageError
from logfocus.core.workspace import Workspace
from logfocus.models.document import DocumentSnapshot
from logfocus.models.filter_def import ProjectDefinition

click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True

FOCUS_MARKER = ">>>>>>>focus mode<<<<<<<"


class ConsoleDecorations:
    """Decoration sink that remembers the latest ranges per document and filter."""

    def __init__(self):
        self._decorations: dict[str, dict[str, tuple[str, list[LineRange]]]] = {}

    def set_decorations(self, document_id, filter_id, color, ranges) -> None:
        per_filter = self._decorations.setdefault(document_id, {})
        if ranges:
            per_filter[filter_id] = (color, list(ranges))
        else:
            per_filter.pop(filter_id, None)

    def line_styles(self, document_id: str) -> dict[int, str]:
        """Background style per decorated line; later filters win on overlap."""
        styles: dict[int, str] = {}
        for color, ranges in self._decorations.get(document_id, {}).values():
            for line_range in ranges:
                for line in range(line_range.start_line, line_range.end_line + 1):
                    styles[line] = f"on {to_hex(color)}"
        return styles


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_config(config_path: str | None) -> Config:
    loader = ConfigLoader()
    if config_path:
        return loader.load(Path(config_path))
    return loader.load_merged()


def _load_project(workspace: Workspace, project_file: str) -> Project:
    path = Path(project_file)
    try:
        definition = ProjectDefinition.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise StorageError(f"invalid project file: {e}", path=path) from e
    project = Project.from_definition(
        definition,
        config=workspace.config,
        allocator=workspace.allocator,
        sink=workspace.sink,
    )
    workspace.projects[project.name] = project
    workspace.select_project(project.name)
    return project


def _print_lines(
    console: Console,
    lines: list[str],
    styles: dict[int, str],
    numbers: list[int] | None = None,
) -> None:
    for index, line in enumerate(lines):
        text = Text(line, style=styles.get(index, ""))
        if numbers is not None:
            text = Text(f"{numbers[index] + 1:>6}  ", style="dim") + text
        console.print(text, soft_wrap=True)


def _print_counts(console: Console, project: Project, visible: int, total: int) -> None:
    table = Table(title="Filter Matches")
    table.add_column("Pattern", style="cyan")
    table.add_column("Mode")
    table.add_column("Shown", justify="center")
    table.add_column("Matches", justify="right")

    for filt in project.filters.values():
        table.add_row(
            filt.pattern,
            "exclude" if filt.exclude else "include",
            "[green]✓[/green]" if filt.shown else "[dim]✗[/dim]",
            str(filt.count),
        )

    console.print(table)
    console.print(f"visible={visible} total={total}")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("logfile", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--version", is_flag=True, help="Show version and exit.")
@click.option(
    "--include", "-i",
    "include_patterns",
    type=str,
    multiple=True,
    help="Regex pattern whose matching lines are kept and highlighted (can be repeated)."
)
@click.option(
    "--exclude", "-x",
    "exclude_patterns",
    type=str,
    multiple=True,
    help="Regex pattern whose matching lines are dropped (can be repeated)."
)
@click.option(
    "--project",
    "project_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Project JSON file providing the filters."
)
@click.option(
    "--ignore-case",
    is_flag=True,
    help="Match --include/--exclude patterns case-insensitively."
)
@click.option(
    "--focus",
    is_flag=True,
    help="Show only the visible lines (focus view) instead of the whole file."
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json", "count"], case_sensitive=False),
    default="text",
    help="Output format: text (colored), json (JSONL of visible lines), or count (summary)."
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (default: discover logfocus.toml files)."
)
@click.option("--verbose", "-v", is_flag=True, help="Log cache activity to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    logfile: str | None,
    version: bool,
    include_patterns: tuple[str, ...],
    exclude_patterns: tuple[str, ...],
    project_file: str | None,
    ignore_case: bool,
    focus: bool,
    output_format: str,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Logfocus - highlight and focus log files with regex filters.

    Lines matching include filters are highlighted. With [bold]--focus[/bold]
    only the lines kept by the filters are shown.
    """
    console = Console()

    if version:
        from logfocus import __version__
        click.echo(f"logfocus {__version__}")
        return

    if logfile is None:
        console.print("[red]Error:[/red] LOGFILE is required.")
        ctx.exit(1)

    _setup_logging(verbose)

    try:
        config = _load_config(config_path)
        sink = ConsoleDecorations()
        workspace = Workspace(config=config, sink=sink)
        if project_file:
            project = _load_project(workspace, project_file)
        else:
            project = workspace.ensure_default_project()

        if include_patterns or exclude_patterns:
            group = project.add_group("command line")
            for pattern in include_patterns:
                project.add_filter(group.id, pattern, ignore_case=ignore_case)
            for pattern in exclude_patterns:
                project.add_filter(group.id, pattern, exclude=True, ignore_case=ignore_case)
    except (ConfigError, InvalidPatternError, ProjectError, StorageError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        ctx.exit(1)

    snapshot = DocumentSnapshot.from_path(Path(logfile))
    workspace.refresh([snapshot], active_id=snapshot.document_id)
    visible = workspace.visible_lines(snapshot)

    if output_format.lower() == "json":
        for line in visible:
            obj = {
                "line": line + 1,
                "text": snapshot.lines[line],
                "filters": [
                    f.pattern for f in project.filters.values()
                    if f.test(snapshot.lines[line])
                ],
            }
            print(json.dumps(obj))

    elif output_format.lower() == "count":
        _print_counts(console, project, len(visible), snapshot.line_count)

    elif focus:
        focus_doc = workspace.focus_snapshot(snapshot)
        styles: dict[int, str] = {}
        for filter_id, ranges in workspace.focus_decorations(snapshot, focus_doc).items():
            color = to_hex(project.filters[filter_id].color)
            for line_range in ranges:
                styles[line_range.start_line] = f"on {color}"
        console.print(FOCUS_MARKER, style="dim", markup=False)
        _print_lines(console, focus_doc.lines[1:], {k - 1: v for k, v in styles.items()}, visible)

    else:
        _print_lines(console, snapshot.lines, sink.line_styles(snapshot.document_id))


if __name__ == "__main__":
    cli()
