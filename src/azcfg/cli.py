"""CLI interface for azcfg.

Typer-based command-line interface with Rich output formatting.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from azcfg import __version__
from azcfg.catalog import ProjectCatalog
from azcfg.config import AzcfgConfig, default_config, load_config
from azcfg.exceptions import AzcfgError
from azcfg.generation import GenerationService, request_from_config
from azcfg.manifest import load_manifest, make_entry, save_manifest
from azcfg.project import ProjectManager
from azcfg.registry import default_registry
from azcfg.template import SectionTable, generate, merge_user_code
from azcfg.types import FillerRegion, GenerationKind, SectionFilter

__all__ = ["app"]

app = typer.Typer(
    name="azcfg",
    help="Azure RTOS configurator — edit USER CODE sections and drive AutoGen generation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()

logger = logging.getLogger(__name__)

_NO_PROJECT = "[yellow]No azcfg project found.[/yellow] Run [bold]azcfg init[/bold] first."


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{message}[/red]")
    return typer.Exit(code=1)


def _read_text(path: Path) -> str:
    """Read UTF-8 text without newline translation."""
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(f"Cannot read {path}: {e}") from e


def _load_table(template: Path, existing: Path | None = None) -> SectionTable:
    table = SectionTable.parse(_read_text(template))
    for warning in table.warnings:
        console.print(f"[yellow]{template.name}:{warning.line}:[/yellow] {warning.message}")
    if existing is not None and existing.exists():
        report = merge_user_code(table, _read_text(existing))
        if report.orphaned:
            console.print(
                f"[yellow]Dropped user code for removed section(s):[/yellow] "
                f"{', '.join(report.orphaned)}"
            )
    return table


def _load_project_config() -> AzcfgConfig:
    root = ProjectManager.find_project_root()
    if root is None:
        return default_config()
    return load_config(ProjectManager(root).config_path)


def _write_output(output: Path, table: SectionTable, template: Path) -> None:
    """Write regenerated text and record it in the project manifest, if any."""
    text = generate(table)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8", newline="")
    except OSError as e:
        raise _fail(f"Cannot write {output}: {e}") from e

    root = ProjectManager.find_project_root()
    if root is not None:
        pm = ProjectManager(root)
        entry = make_entry(
            output.resolve(),
            text,
            template=str(template),
            user_sections=len(table.list_sections(SectionFilter.USER_CODE_ONLY)),
            modified_sections=tuple(table.modified_sections()),
            root=root,
        )
        try:
            manifest = load_manifest(pm.manifest_path)
            manifest.add_file(entry)
            save_manifest(manifest, pm.manifest_path)
        except AzcfgError as e:
            logger.warning("Could not record %s in the manifest: %s", output, e)
            console.print(f"[yellow]Manifest not updated:[/yellow] {e}")

    console.print(f"[green]Wrote[/green] {output}")


@app.command()
def version() -> None:
    """Show azcfg version."""
    console.print(f"azcfg {__version__}")


@app.command()
def init(
    pack_root: Annotated[
        str,
        typer.Option("--pack-root", "-p", help="Path to the PACK_AZRTOS_AutoGen tree"),
    ] = "",
    series: Annotated[
        str,
        typer.Option("--series", "-s", help="Default STM32 series (e.g., h7)"),
    ] = "",
    board: Annotated[
        str,
        typer.Option("--board", "-b", help="Default board (e.g., NUCLEO-H723ZG)"),
    ] = "",
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Project name"),
    ] = "",
) -> None:
    """Initialize a new azcfg project in the current directory."""
    pm = ProjectManager()
    try:
        azcfg_dir = pm.init(pack_root=pack_root, series=series, board=board, name=name)
    except (AzcfgError, OSError) as e:
        raise _fail(f"Failed to initialize project: {e}") from e

    console.print(f"[green]Initialized azcfg project[/green] at {azcfg_dir}")
    console.print("\nCreated:")
    console.print(f"  {pm.config_path}")
    console.print(f"  {pm.manifest_path}")

    console.print("\nNext steps:")
    console.print("  azcfg catalog                    List series, boards and applications")
    console.print("  azcfg sections <template>        Show USER CODE sections of a template")


@app.command()
def status() -> None:
    """Show project status: generated files, edited sections, config."""
    root = ProjectManager.find_project_root()
    try:
        st = ProjectManager(root).status() if root is not None else None
    except AzcfgError as e:
        raise _fail(str(e)) from e

    if st is None or not st.initialized:
        console.print(_NO_PROJECT)
        raise typer.Exit(code=1)

    console.print(f"[bold]azcfg project:[/bold] {st.root.name}")
    if st.config:
        if st.config.project.pack_root:
            console.print(f"  Pack root: {st.config.project.pack_root}")
        if st.config.defaults.series:
            console.print(f"  Series: {st.config.defaults.series}")
        if st.config.defaults.board:
            console.print(f"  Board: {st.config.defaults.board}")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("metric", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Generated files", str(st.file_count))
    table.add_row("Edited sections", str(st.modified_section_count))
    console.print(table)

    for path in st.drifted:
        console.print(f"  [yellow]Changed on disk since generation:[/yellow] {path}")

    if st.file_count == 0:
        console.print(
            "\n[dim]No files generated yet. Run [bold]azcfg merge[/bold] or "
            "[bold]azcfg set[/bold] to write one.[/dim]"
        )


@app.command()
def catalog(
    series: Annotated[
        str,
        typer.Option("--series", "-s", help="List boards of this series"),
    ] = "",
    board: Annotated[
        str,
        typer.Option("--board", "-b", help="List middleware and applications of this board"),
    ] = "",
    middleware: Annotated[
        str,
        typer.Option("--middleware", "-m", help="Restrict applications to this middleware"),
    ] = "",
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="AutoGen tree (default: [project] pack_root)"),
    ] = None,
) -> None:
    """Browse series, boards, middleware and applications of an AutoGen tree."""
    try:
        if root is None:
            project_root = ProjectManager.find_project_root()
            pm = ProjectManager(project_root) if project_root else ProjectManager()
            root = pm.resolve_pack_root(_load_project_config())
        cat = ProjectCatalog(root)
        if board:
            _print_board(cat, board, middleware)
        elif series:
            console.print(f"[bold]Boards for {series}:[/bold]")
            for name in cat.boards_for_series(series):
                console.print(f"  {name}")
        else:
            _print_summary(cat)
    except AzcfgError as e:
        raise _fail(str(e)) from e


def _print_summary(cat: ProjectCatalog) -> None:
    summary = cat.summary()
    if summary.missing_paths:
        console.print(
            f"[yellow]Incomplete AutoGen project, missing:[/yellow] "
            f"{', '.join(summary.missing_paths)}"
        )
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("kind", style="dim")
    table.add_column("values")
    table.add_row("Series", ", ".join(summary.series) or "-")
    table.add_row("Boards", ", ".join(summary.boards) or "-")
    table.add_row("Middleware", ", ".join(summary.middleware) or "-")
    table.add_row("Applications", str(len(summary.applications)))
    console.print(table)


def _print_board(cat: ProjectCatalog, board: str, middleware: str) -> None:
    names = [middleware] if middleware else cat.middleware_for_board(board)
    if not names:
        console.print(f"[yellow]No applications found for {board}.[/yellow]")
        return

    table = Table(title=board)
    table.add_column("Middleware", style="bold")
    table.add_column("Application")
    table.add_column("Description", style="dim")
    table.add_column("Templates", justify="right")
    for mw in names:
        for app_name in cat.applications_for_middleware(board, mw):
            details = cat.application_details(board, app_name)
            templates = cat.template_files(mw, app_name)
            table.add_row(mw, app_name, details.description, str(len(templates)))
    console.print(table)


@app.command()
def sections(
    template: Annotated[Path, typer.Argument(help="Template or generated source file")],
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include template-owned sections"),
    ] = False,
    existing: Annotated[
        Path | None,
        typer.Option("--existing", "-e", help="Generated file whose user code to apply"),
    ] = None,
) -> None:
    """List the sections of a template."""
    table = _load_table(template, existing)
    section_filter = SectionFilter.ALL if show_all else SectionFilter.USER_CODE_ONLY

    out = Table(title=template.name)
    out.add_column("Section", style="bold")
    out.add_column("Kind")
    out.add_column("Lines", justify="right")
    out.add_column("Modified")
    for section_id in table.list_sections(section_filter):
        region = table.get(section_id)
        kind = "template" if isinstance(region, FillerRegion) else "user code"
        lines = f"{region.line_start + 1}-{region.line_end}"
        modified = "[yellow]yes[/yellow]" if table.is_modified(section_id) else ""
        out.add_row(section_id, kind, lines, modified)
    console.print(out)


@app.command()
def show(
    template: Annotated[Path, typer.Argument(help="Template or generated source file")],
    section: Annotated[str, typer.Argument(help="Section id")],
    existing: Annotated[
        Path | None,
        typer.Option("--existing", "-e", help="Generated file whose user code to apply"),
    ] = None,
) -> None:
    """Print the current content of one section."""
    table = _load_table(template, existing)
    try:
        content = table.read_content(section)
    except AzcfgError as e:
        raise _fail(str(e)) from e
    typer.echo(content)


@app.command(name="set")
def set_cmd(
    template: Annotated[Path, typer.Argument(help="Template file")],
    section: Annotated[str, typer.Argument(help="USER CODE section id")],
    output: Annotated[Path, typer.Option("--output", "-o", help="File to write")],
    text: Annotated[
        str | None,
        typer.Option("--text", "-t", help="New section body"),
    ] = None,
    from_file: Annotated[
        Path | None,
        typer.Option("--from-file", "-f", help="Read the new section body from a file"),
    ] = None,
) -> None:
    """Replace one USER CODE section and write the regenerated file.

    User code already present in OUTPUT is kept for every other section.
    """
    if (text is None) == (from_file is None):
        raise _fail("Give exactly one of --text or --from-file")
    body = text if text is not None else _read_text(from_file)  # type: ignore[arg-type]

    table = _load_table(template, output)
    try:
        table.update(section, body)
    except AzcfgError as e:
        raise _fail(str(e)) from e
    _write_output(output, table, template)


@app.command()
def reset(
    template: Annotated[Path, typer.Argument(help="Template file")],
    generated: Annotated[Path, typer.Argument(help="Previously generated file")],
    section: Annotated[str, typer.Argument(help="USER CODE section id")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="File to write (default: GENERATED)"),
    ] = None,
) -> None:
    """Restore one USER CODE section to the template's default body."""
    table = _load_table(template, generated)
    try:
        table.reset(section)
    except AzcfgError as e:
        raise _fail(str(e)) from e
    _write_output(output or generated, table, template)


@app.command()
def render(
    template: Annotated[Path, typer.Argument(help="Template file")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="File to write (default: stdout)"),
    ] = None,
) -> None:
    """Render a template without edits."""
    table = _load_table(template)
    if output is None:
        typer.echo(generate(table), nl=False)
        return
    _write_output(output, table, template)


@app.command()
def merge(
    template: Annotated[Path, typer.Argument(help="New template file")],
    existing: Annotated[Path, typer.Argument(help="File generated from the old template")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="File to write (default: EXISTING)"),
    ] = None,
) -> None:
    """Regenerate a file from a new template, keeping its USER CODE sections."""
    if not existing.exists():
        raise _fail(f"File not found: {existing}")
    table = _load_table(template, existing)
    modified = table.modified_sections()
    console.print(f"Kept user code in {len(modified)} section(s)")
    _write_output(output or existing, table, template)


@app.command()
def backends() -> None:
    """List the available generation backends."""
    configured = _load_project_config().generation.backend
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("name", style="bold")
    table.add_column("description", style="dim")
    table.add_column("default")
    for info in default_registry.describe():
        marker = "[green]configured[/green]" if info.name == configured else ""
        table.add_row(info.name, info.description, marker)
    console.print(table)


@app.command(name="generate")
def generate_cmd(
    kind: Annotated[GenerationKind, typer.Argument(help="What to generate")],
    series: Annotated[str, typer.Option("--series", "-s", help="STM32 series")] = "",
    board: Annotated[str, typer.Option("--board", "-b", help="Board name")] = "",
    application: Annotated[
        str,
        typer.Option("--app", "-a", help="Application name"),
    ] = "",
    middleware: Annotated[
        list[str] | None,
        typer.Option("--middleware", "-m", help="Middleware (repeatable)"),
    ] = None,
    toolchain: Annotated[str, typer.Option("--toolchain", help="Target toolchain")] = "",
    output_directory: Annotated[
        str,
        typer.Option("--output-directory", "-o", help="Where the backend writes"),
    ] = "",
    xcube: Annotated[
        str,
        typer.Option("--xcube-firmware-directory", "-x", help="X-Cube firmware path"),
    ] = "",
    backend: Annotated[
        str,
        typer.Option("--backend", help="Generation backend (default: [generation] backend)"),
    ] = "",
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Seconds before giving up"),
    ] = None,
) -> None:
    """Run an AutoGen generation pipeline (mx_files, pack, application, full_pack)."""
    try:
        config = _load_project_config()
        project_root = ProjectManager.find_project_root()
        if project_root is not None and config.project.pack_root:
            config.project.pack_root = str(ProjectManager(project_root).resolve_pack_root(config))
        provider = default_registry.create(backend or config.generation.backend, config)
    except AzcfgError as e:
        raise _fail(str(e)) from e

    request = request_from_config(
        kind,
        config,
        series=series,
        board=board,
        application_name=application,
        middleware=tuple(middleware or ()),
        toolchain=toolchain,
        output_directory=output_directory,
        xcube_firmware_directory=xcube,
    )
    service = GenerationService(provider, timeout_s=config.generation.timeout_s)

    with console.status(f"Generating {kind.value}..."):
        result = service.run(request, timeout_s=timeout)

    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        if result.error:
            console.print(result.error, markup=False)
        raise typer.Exit(code=1)

    console.print(f"[green]{result.message}[/green]")
    if result.output_path:
        console.print(f"  Output: {result.output_path}")
