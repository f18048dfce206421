"""CLI for archive operations on virtual paths."""

from typing import Dict, Tuple

import rich_click as click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ...application.container import ServiceContainer
from ...application.dtos import ArchiveOperationResultDto, CallerContext
from ...application.exceptions import ApplicationError, PermissionDeniedError
from .main import console


def _services(ctx) -> Tuple[ServiceContainer, CallerContext]:
    container: ServiceContainer = ctx.obj["container"]
    try:
        context = container.context_for(ctx.obj["username"])
    except ApplicationError as e:
        _fail(ctx, str(e))
    return container, context


def _fail(ctx, message: str, permission: bool = False):
    label = "Permission denied" if permission else "Error"
    console.print(f"[red]{label}:[/red] {escape(message)}")
    ctx.exit(1)


def _run(ctx, operation):
    try:
        return operation()
    except PermissionDeniedError as e:
        _fail(ctx, str(e), permission=True)
    except ApplicationError as e:
        _fail(ctx, f"[{e.kind}] {e}")


def _report(result: ArchiveOperationResultDto, verb: str) -> None:
    console.print(f"[green]✓[/green] {verb} [cyan]{result.destination_path}[/cyan]")
    console.print(f"   Format: [blue]{result.archive_format}[/blue]")
    console.print(f"   Files owned: [yellow]{result.files_owned}[/yellow]")
    console.print(f"   Duration: [dim]{result.duration_seconds:.2f}s[/dim]")


def _add_tree(branch: Tree, node: Dict) -> None:
    for name, child in sorted(node.get("children", {}).items()):
        if child["isDir"]:
            _add_tree(branch.add(f"[bold blue]{name}/[/bold blue]"), child)
        else:
            branch.add(f"{name} [dim]({child['size']:,} bytes)[/dim]")


@click.group()
def archive():
    """Inspect, create and extract archives."""
    pass


@archive.command(name="extract")
@click.argument("source")
@click.argument("destination")
@click.option("--format", "archive_format", help="Archive format (zip, tar, tar.gz); detected when omitted")
@click.pass_context
def extract(ctx, source: str, destination: str, archive_format: str = None):
    """Extract SOURCE into the DESTINATION directory.

    Examples:
        arcgate archive extract user:/in/data.zip user:/out
        arcgate archive extract user:/in/blob user:/out --format tar.gz
    """
    container, context = _services(ctx)
    result = _run(ctx, lambda: container.archive_service.extract(context, source, destination, archive_format))
    _report(result, "Extracted to")


@archive.command(name="create")
@click.argument("sources", nargs=-1, required=True)
@click.argument("destination")
@click.option("--format", "archive_format", default="zip", show_default=True,
              help="Archive format (zip, tar, tar.gz)")
@click.pass_context
def create(ctx, sources: Tuple[str, ...], destination: str, archive_format: str):
    """Pack SOURCES into a new archive at DESTINATION."""
    container, context = _services(ctx)
    spec = sources[0] if len(sources) == 1 else list(sources)
    result = _run(ctx, lambda: container.archive_service.create(context, spec, destination, archive_format))
    _report(result, "Created")


@archive.command(name="compress")
@click.argument("source")
@click.argument("destination")
@click.pass_context
def compress(ctx, source: str, destination: str):
    """gzip a single file."""
    container, context = _services(ctx)
    result = _run(ctx, lambda: container.archive_service.compress(context, source, destination))
    _report(result, "Compressed to")


@archive.command(name="decompress")
@click.argument("source")
@click.argument("destination")
@click.pass_context
def decompress(ctx, source: str, destination: str):
    """gunzip a single file."""
    container, context = _services(ctx)
    result = _run(ctx, lambda: container.archive_service.decompress(context, source, destination))
    _report(result, "Decompressed to")


@archive.command(name="detect")
@click.argument("path")
@click.pass_context
def detect(ctx, path: str):
    """Print the archive format of PATH."""
    container, context = _services(ctx)
    archive_format = _run(ctx, lambda: container.archive_service.detect_format(context, path))
    console.print(archive_format.value)


@archive.command(name="validate")
@click.argument("path")
@click.pass_context
def validate(ctx, path: str):
    """Check whether PATH is a readable archive."""
    container, context = _services(ctx)
    valid = _run(ctx, lambda: container.archive_service.is_valid_archive(context, path))
    if valid:
        console.print(f"[green]✓[/green] {path} is a valid archive")
    else:
        _fail(ctx, f"{path} is not a valid archive")


@archive.command(name="tree")
@click.argument("path")
@click.option("--json", "as_json", is_flag=True, help="Print the raw JSON tree")
@click.pass_context
def tree(ctx, path: str, as_json: bool):
    """Show the entry tree of a zip archive."""
    container, context = _services(ctx)
    if as_json:
        console.print_json(_run(ctx, lambda: container.zip_index_service.list_contents_json(context, path)))
        return
    root = _run(ctx, lambda: container.zip_index_service.list_tree(context, path))
    display = Tree(f"[bold]{path}[/bold]")
    _add_tree(display, root.to_dict())
    console.print(display)


@archive.command(name="ls")
@click.argument("path")
@click.argument("directory", default="")
@click.pass_context
def ls(ctx, path: str, directory: str):
    """List one directory inside a zip archive (root by default)."""
    container, context = _services(ctx)
    listing = _run(ctx, lambda: container.zip_index_service.list_directory(context, path, directory))

    table = Table(title=f"{path}:{listing.directory or '/'}", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="blue")
    for item in listing.items:
        table.add_row(item, "dir" if item.endswith("/") else "file")
    console.print(Panel.fit(table))


@archive.command(name="get")
@click.argument("path")
@click.argument("entry")
@click.pass_context
def get(ctx, path: str, entry: str):
    """Extract ENTRY of a zip to the transient namespace."""
    container, context = _services(ctx)
    result = _run(ctx, lambda: container.entry_extraction_service.extract_entry(context, path, entry))
    console.print(f"[green]✓[/green] {result.entry_name} -> [cyan]{result.transient_path}[/cyan] "
                  f"[dim]({result.size:,} bytes)[/dim]")
