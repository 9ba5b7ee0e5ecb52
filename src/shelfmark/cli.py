"""Command line interface for Shelfmark."""

from __future__ import annotations

import asyncio
import difflib
from pathlib import Path
from typing import Any, Awaitable, Iterable, Optional, TypeVar

import click
import yaml
from pydantic import TypeAdapter
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from shelfmark.catalog import (
    AlreadyExistsError,
    CatalogError,
    CatalogRepository,
    Item,
    ItemRecord,
    ItemValidationError,
    LocalDocumentStore,
    NotFoundError,
    StoreIOError,
    merge_tags,
)
from shelfmark.config import (
    ConfigError,
    ConfigManager,
    ShelfmarkConfig,
    assign_nested,
    resolve_with_precedence,
)
from shelfmark.index import (
    FolderNode,
    TreeNode,
    collection_stats,
    load_forest,
    recent_items,
)
from shelfmark.logging_config import configure_logging
from shelfmark.search import (
    FolderFilterState,
    ItemQuery,
    apply_filters,
    toggle_folder_filter,
)

console = Console()

T = TypeVar("T")

_FOREST_ADAPTER = TypeAdapter(list[TreeNode])
_ERROR_CODES: tuple[tuple[type[Exception], str], ...] = (
    (ItemValidationError, "validation_error"),
    (NotFoundError, "not_found"),
    (AlreadyExistsError, "already_exists"),
    (StoreIOError, "store_error"),
    (CatalogError, "catalog_error"),
    (ConfigError, "config_error"),
)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _fail(exc: Exception, *, json_output: bool) -> None:
    code = next(
        (name for kind, name in _ERROR_CODES if isinstance(exc, kind)),
        "internal_error",
    )
    details = {"problems": exc.problems} if isinstance(exc, ItemValidationError) else None
    _handle_cli_error(str(exc), code=code, json_output=json_output, details=details, original=exc)


def _emit_message(message: Any, *, quiet: bool, error: bool = False) -> None:
    """Print ``message`` unless quiet mode suppresses it.

    Args:
        message: Renderable or string to emit.
        quiet: Whether quiet mode is active.
        error: Whether the message reports an error, which quiet mode keeps.
    """

    if quiet and not error:
        return
    console.print(message)


def _run(coroutine: Awaitable[T]) -> T:
    return asyncio.run(coroutine)  # type: ignore[arg-type]


def _split_tags(values: Iterable[str]) -> list[str]:
    """Expand repeated and comma-separated tag options into a flat list."""

    tags: list[str] = []
    for value in values:
        tags.extend(part.strip() for part in value.split(","))
    return [tag for tag in tags if tag]


class _Session:
    """Configuration and repository shared by a single catalog command."""

    def __init__(self, ctx: click.Context, root: Optional[str], json_output: bool) -> None:
        self.json_output = json_output
        try:
            self.config: ShelfmarkConfig = ConfigManager().load()
        except ConfigError as exc:
            _fail(exc, json_output=json_output)
        verbose = bool(ctx.find_root().params.get("verbose"))
        configure_logging(self.config.logging.level, verbose=verbose)

        resolved = root or self.config.catalog.root
        if not resolved:
            _handle_cli_error(
                "No catalog --root given and catalog.root is not configured.",
                code="missing_root",
                json_output=json_output,
            )
        self.root = Path(str(resolved)).expanduser()
        self.repository = CatalogRepository(LocalDocumentStore(self.root))

    @property
    def quiet(self) -> bool:
        return self.json_output or self.config.cli.quiet_default

    def run(self, coroutine: Awaitable[T]) -> T:
        try:
            return _run(coroutine)
        except CatalogError as exc:
            _fail(exc, json_output=self.json_output)
            raise  # pragma: no cover - _fail always raises


def _record_payload(record: ItemRecord) -> dict[str, Any]:
    return {"path": record.path, "item": record.item.model_dump(mode="json")}


def _root_option(func: Any) -> Any:
    return click.option(
        "-r",
        "--root",
        type=click.Path(file_okay=False, path_type=str),
        help="Catalog directory (defaults to catalog.root from the configuration).",
    )(func)


def _render_record(record: ItemRecord) -> Table:
    item = record.item
    table = Table(show_header=False, title=escape(item.title))
    table.add_column("Field", style="bold")
    table.add_column("Value")
    rows = [
        ("Path", record.path),
        ("ID", item.id),
        ("Link", item.link),
        ("Type", item.type),
        ("Folder", item.folder),
        ("Tags", ", ".join(f"#{tag}" for tag in item.tags)),
        ("Description", item.description),
        ("Banner", item.banner or ""),
        ("Icon", item.icon or ""),
        ("Created", item.created_at.isoformat()),
        ("Updated", item.updated_at.isoformat()),
    ]
    for name, value in rows:
        table.add_row(name, escape(value))
    return table


def _render_forest(forest: list[TreeNode], label: str) -> Tree:
    tree = Tree(escape(label))

    def _attach(branch: Tree, nodes: list[TreeNode]) -> None:
        for node in nodes:
            prefix = f"{node.icon} " if node.icon else ""
            if isinstance(node, FolderNode):
                child = branch.add(
                    f"{escape(prefix)}[bold]{escape(node.name)}[/bold] ({node.item_count})"
                )
                _attach(child, node.children)
            else:
                branch.add(f"{escape(prefix)}{escape(node.name)}")

    _attach(tree, forest)
    return tree


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="shelfmark")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Shelfmark catalogs links and references as markdown documents."""


@cli.command()
@_root_option
@click.option("--title", required=True, help="Item title; also used as the file name.")
@click.option("--link", default="", help="Source URL.")
@click.option("--description", default="", help="Free-form description.")
@click.option("--folder", help="Folder for the item (defaults to catalog.default_folder).")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag to attach; repeat or comma-separate.")
@click.option("-q", "--quick", "quick_tags", multiple=True, help="Predefined quick tag to attach.")
@click.option("--type", "item_type", default="link", show_default=True, help="Item type.")
@click.option("--banner", help="Banner image URL.")
@click.option("--icon", help="Icon asset path.")
@click.option("--json", "json_output", is_flag=True, help="Emit the created item as JSON.")
@click.pass_context
def add(
    ctx: click.Context,
    root: Optional[str],
    title: str,
    link: str,
    description: str,
    folder: Optional[str],
    tags: tuple[str, ...],
    quick_tags: tuple[str, ...],
    item_type: str,
    banner: Optional[str],
    icon: Optional[str],
    json_output: bool,
) -> None:
    """Create a new item in the catalog."""

    session = _Session(ctx, root, json_output)
    unknown = [tag for tag in quick_tags if tag not in session.config.catalog.predefined_tags]
    if unknown:
        _handle_cli_error(
            f"Unknown quick tag(s): {', '.join(unknown)}",
            code="validation_error",
            json_output=json_output,
        )

    item = Item(
        title=title,
        link=link,
        description=description,
        folder=folder or session.config.catalog.default_folder,
        tags=merge_tags(_split_tags(tags), quick_tags),
        type=item_type,
        banner=banner,
        icon=icon,
    )
    record = session.run(session.repository.create(item))

    if json_output:
        console.print_json(data=_record_payload(record))
        return
    _emit_message(f"[green]Created {escape(record.path)}.[/green]", quiet=session.quiet)


@cli.command()
@_root_option
@click.argument("path")
@click.option("--json", "json_output", is_flag=True, help="Emit the item as JSON.")
@click.pass_context
def show(ctx: click.Context, root: Optional[str], path: str, json_output: bool) -> None:
    """Display the item stored at PATH."""

    session = _Session(ctx, root, json_output)
    record = session.run(session.repository.get_by_path(path))
    if record is None:
        _handle_cli_error(f"No item at {path}", code="not_found", json_output=json_output)
        return

    if json_output:
        console.print_json(data=_record_payload(record))
        return
    console.print(_render_record(record))


@cli.command()
@_root_option
@click.argument("path")
@click.option("--title", help="New title; renames the document.")
@click.option("--link", help="New source URL.")
@click.option("--description", help="New description.")
@click.option("--folder", help="New folder; moves the document.")
@click.option("--add-tag", "add_tags", multiple=True, help="Tag to add.")
@click.option("--remove-tag", "remove_tags", multiple=True, help="Tag to remove.")
@click.option("--type", "item_type", help="New item type.")
@click.option("--banner", help="New banner image URL.")
@click.option("--icon", help="New icon asset path.")
@click.option("--json", "json_output", is_flag=True, help="Emit the updated item as JSON.")
@click.pass_context
def edit(
    ctx: click.Context,
    root: Optional[str],
    path: str,
    title: Optional[str],
    link: Optional[str],
    description: Optional[str],
    folder: Optional[str],
    add_tags: tuple[str, ...],
    remove_tags: tuple[str, ...],
    item_type: Optional[str],
    banner: Optional[str],
    icon: Optional[str],
    json_output: bool,
) -> None:
    """Edit the item stored at PATH, moving or renaming it when needed."""

    session = _Session(ctx, root, json_output)

    async def _edit() -> ItemRecord:
        record = await session.repository.get_by_path(path)
        if record is None:
            raise NotFoundError(f"No item at {path}")
        changes = {
            key: value
            for key, value in {
                "title": title,
                "link": link,
                "description": description,
                "folder": folder,
                "type": item_type,
                "banner": banner,
                "icon": icon,
            }.items()
            if value is not None
        }
        removed = set(_split_tags(remove_tags))
        tags = [tag for tag in record.item.tags if tag not in removed]
        changes["tags"] = merge_tags(tags, _split_tags(add_tags))
        edited = Item.model_validate({**record.item.model_dump(), **changes})
        return await session.repository.update(record.path, edited)

    updated = session.run(_edit())
    if json_output:
        console.print_json(data=_record_payload(updated))
        return
    _emit_message(f"[green]Updated {escape(updated.path)}.[/green]", quiet=session.quiet)


@cli.command()
@_root_option
@click.argument("path")
@click.option("--json", "json_output", is_flag=True, help="Emit the result as JSON.")
@click.pass_context
def rm(ctx: click.Context, root: Optional[str], path: str, json_output: bool) -> None:
    """Delete the item stored at PATH."""

    session = _Session(ctx, root, json_output)
    session.run(session.repository.delete(path))
    if json_output:
        console.print_json(data={"deleted": path})
        return
    _emit_message(f"[green]Deleted {escape(path)}.[/green]", quiet=session.quiet)


@cli.command("ls")
@_root_option
@click.option("-s", "--search", "query", default="", help="Case-insensitive text search.")
@click.option("-t", "--tag", "tags", multiple=True, help="Show items with any of these tags.")
@click.option("--folder", help="Only show items under this folder.")
@click.option("--include", multiple=True, help="Folder to include; repeatable.")
@click.option("--exclude", multiple=True, help="Folder to exclude; repeatable.")
@click.option("--json", "json_output", is_flag=True, help="Emit matching items as JSON.")
@click.pass_context
def list_items(
    ctx: click.Context,
    root: Optional[str],
    query: str,
    tags: tuple[str, ...],
    folder: Optional[str],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    json_output: bool,
) -> None:
    """List items, narrowed by search text, tags and folders."""

    session = _Session(ctx, root, json_output)
    filters = FolderFilterState()
    for path in include:
        filters = toggle_folder_filter(filters, path, "include")
    for path in exclude:
        filters = toggle_folder_filter(filters, path, "exclude")

    records = session.run(session.repository.list_all())
    records.sort(key=lambda record: record.path)
    matches = apply_filters(
        records,
        ItemQuery(search=query, tags=_split_tags(tags), folder=folder, folder_filters=filters),
    )

    if json_output:
        console.print_json(
            data={
                "counts": {"total": len(records), "matches": len(matches)},
                "results": [_record_payload(record) for record in matches],
            }
        )
        return

    if not matches:
        console.print("[yellow]No items found. Adjust your filters.[/yellow]")
    else:
        table = Table(title=f"Items in {escape(str(session.root))}")
        table.add_column("Title")
        table.add_column("Folder")
        table.add_column("Tags")
        table.add_column("Path")
        for record in matches:
            table.add_row(
                escape(record.item.title),
                escape(record.item.folder),
                escape(", ".join(record.item.tags)),
                escape(record.path),
            )
        console.print(table)
    _emit_message(
        f"[green]Showing {len(matches)} of {len(records)} items.[/green]",
        quiet=session.quiet,
    )


@cli.command()
@_root_option
@click.option("--json", "json_output", is_flag=True, help="Emit the tree as JSON.")
@click.pass_context
def tree(ctx: click.Context, root: Optional[str], json_output: bool) -> None:
    """Show the folder tree with item counts."""

    session = _Session(ctx, root, json_output)
    forest = session.run(load_forest(session.repository, session.config.folder_icons))
    if json_output:
        console.print_json(data=_FOREST_ADAPTER.dump_python(forest, mode="json"))
        return
    console.print(_render_forest(forest, str(session.root)))


@cli.command()
@_root_option
@click.option("--json", "json_output", is_flag=True, help="Emit tags as JSON.")
@click.pass_context
def tags(ctx: click.Context, root: Optional[str], json_output: bool) -> None:
    """List every tag used in the catalog."""

    session = _Session(ctx, root, json_output)
    found = session.run(session.repository.list_all_tags())
    if json_output:
        console.print_json(data={"tags": found})
        return
    for tag in found:
        console.print(f"#{escape(tag)}")


@cli.command()
@_root_option
@click.option("--json", "json_output", is_flag=True, help="Emit folders as JSON.")
@click.pass_context
def folders(ctx: click.Context, root: Optional[str], json_output: bool) -> None:
    """List every folder in the catalog, including empty ones."""

    session = _Session(ctx, root, json_output)
    found = session.run(session.repository.list_known_folders())
    if json_output:
        console.print_json(data={"folders": found})
        return
    for folder in found:
        console.print(escape(folder))


@cli.command()
@_root_option
@click.option("--json", "json_output", is_flag=True, help="Emit statistics as JSON.")
@click.pass_context
def stats(ctx: click.Context, root: Optional[str], json_output: bool) -> None:
    """Summarize collections, tags and recently updated items."""

    session = _Session(ctx, root, json_output)

    async def _collect() -> tuple[list[ItemRecord], list[TreeNode], list[str]]:
        records = await session.repository.list_all()
        forest = await load_forest(session.repository, session.config.folder_icons)
        all_tags = await session.repository.list_all_tags()
        return records, forest, all_tags

    records, forest, all_tags = session.run(_collect())
    collections = collection_stats(forest)
    recent = recent_items(
        records,
        days=session.config.cli.recent_days,
        limit=session.config.cli.recent_limit,
    )

    if json_output:
        console.print_json(
            data={
                "counts": {
                    "items": len(records),
                    "collections": len(collections),
                    "tags": len(all_tags),
                },
                "collections": [stat.model_dump() for stat in collections],
                "recent": [_record_payload(record) for record in recent],
            }
        )
        return

    icons = session.config.tab_icons
    console.print(
        f"{icons.collections} Collections: {len(collections)}   "
        f"{icons.items} Items: {len(records)}   "
        f"{icons.search} Tags: {len(all_tags)}"
    )
    if collections:
        table = Table(title=f"{icons.analytics} Collections")
        table.add_column("Collection")
        table.add_column("Items", justify="right")
        for stat in collections:
            table.add_row(escape(stat.name), str(stat.item_count))
        console.print(table)
    if recent:
        console.print("[bold]Recently updated:[/bold]")
        for record in recent:
            console.print(f"  - {escape(record.item.title)} ({escape(record.path)})")


@cli.group()
def config() -> None:
    """Manage Shelfmark configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""

    manager = ConfigManager()
    try:
        settings = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(
        settings.model_dump(mode="python"), sort_keys=False, allow_unicode=True
    )
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""

    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException(
            "KEY must specify a dotted path such as 'catalog.default_folder'."
        )

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=ShelfmarkConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    diff = list(
        difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    # The timestamp line always changes; anything beyond it is a real edit.
    changed = [
        line
        for line in diff
        if line[:1] in "+-" and not line[1:].startswith(("# Last updated", "--", "++"))
    ]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("icon")
@click.argument("folder")
@click.argument("icon", required=False)
def config_icon(folder: str, icon: Optional[str]) -> None:
    """Assign ICON to FOLDER in the tree, or clear it when ICON is omitted."""

    manager = ConfigManager()
    try:
        manager.set_folder_icon(folder, icon)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if icon:
        console.print(f"[green]Icon for {escape(folder)} set to {escape(icon)}.[/green]")
    else:
        console.print(f"[green]Icon for {escape(folder)} cleared.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session."""

    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=ShelfmarkConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
