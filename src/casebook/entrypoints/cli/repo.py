"""CASEBOOK repository commands.

Small, scriptable access to the artifact repository: create projects,
folders and artifacts, inspect the folder tree, version history and diffs,
and run the view engine. New ids go to **stdout** on their own line; tables
are rendered with Rich.

All commands read ``CASEBOOK_DB_URL`` and expect an upgraded schema
(``casebook db upgrade``).
"""

from __future__ import annotations

from typing import Any

import click
import click_extra as clickx
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from casebook.bootstrap import AppContainer, bootstrap
from casebook.domain.diff import ChangeKind, FieldChange
from casebook.domain.value_objects import FieldKind, FieldValue, Step
from casebook.interfaces.repositories import ArtifactPatch
from casebook.interfaces.unsettable import UNSET
from casebook.service_layer import commands
from casebook.service_layer.queries import FolderNode
from casebook.service_layer.views import Dimension, DimensionKind

from .helpers import casebook_errors, resolve_db_url, success, warn

_KIND_STYLES = {
    ChangeKind.ADDED: "green",
    ChangeKind.REMOVED: "red",
    ChangeKind.CHANGED: "yellow",
    ChangeKind.UNCHANGED: "dim",
}

actor_option = click.option(
    "--actor",
    "actor_id",
    default="cli",
    envvar="CASEBOOK_ACTOR",
    show_default=True,
    show_envvar=True,
    help="Actor id recorded on versions and checked against permissions.",
)


def _app() -> AppContainer:
    return bootstrap(resolve_db_url())


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


def _fmt(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, Step):
        if value.shared_group_id:
            return f"[shared steps {value.shared_group_id}]"
        return f"{_fmt(value.action)} => {_fmt(value.expected_result)}"
    if isinstance(value, FieldValue):
        return _fmt(value.value)
    if isinstance(value, tuple):
        return ", ".join(_fmt(v) for v in value)
    return escape(str(value))


@click.group(cls=clickx.ExtraGroup)
def repo() -> None:
    """Artifact repository commands."""


# ============================================================================
#                                  Writes
# ============================================================================


@repo.command("create-project")
@click.argument("name")
@actor_option
def create_project(name: str, actor_id: str) -> None:
    """Create a project (and its root folder)."""
    with casebook_errors():
        project_id = _app().message_bus.handle(
            commands.CreateProject(actor_id=actor_id, name=name)
        )
    click.echo(project_id)


@repo.command("create-folder")
@click.argument("project_id")
@click.argument("name")
@click.option("--parent", "parent_id", help="Parent folder id (default: root).")
@actor_option
def create_folder(
    project_id: str, name: str, parent_id: str | None, actor_id: str
) -> None:
    """Create a folder at the end of its siblings."""
    with casebook_errors():
        folder_id = _app().message_bus.handle(
            commands.CreateFolder(
                actor_id=actor_id,
                project_id=project_id,
                name=name,
                parent_id=parent_id,
            )
        )
    click.echo(folder_id)


@repo.command("move-folder")
@click.argument("folder_id")
@click.argument("new_parent_id")
@click.option("--position", type=int, help="0-based index among new siblings.")
@actor_option
def move_folder(
    folder_id: str, new_parent_id: str, position: int | None, actor_id: str
) -> None:
    """Move a folder under another folder."""
    with casebook_errors():
        _app().message_bus.handle(
            commands.MoveFolder(
                actor_id=actor_id,
                folder_id=folder_id,
                new_parent_id=new_parent_id,
                position=position,
            )
        )
    success("Folder moved")


@repo.command("delete-folder")
@click.argument("folder_id")
@click.option("--yes", "-y", is_flag=True, help="Delete without confirmation.")
@actor_option
def delete_folder(folder_id: str, yes: bool, actor_id: str) -> None:
    """Soft-delete a folder with everything beneath it."""
    app = _app()
    with casebook_errors():
        summary = app.queries.folders.delete_summary(folder_id)
        if not yes:
            warn(
                f"This deletes {summary.descendant_folder_count} subfolder(s) and "
                f"{summary.artifact_count} artifact(s)."
            )
            click.confirm("Are you sure you want to proceed?", abort=True)
        summary = app.message_bus.handle(
            commands.DeleteFolder(actor_id=actor_id, folder_id=folder_id)
        )
    success(
        f"Deleted {len(summary.folder_ids)} folder(s) and "
        f"{summary.artifact_count} artifact(s)"
    )


@repo.command("create-artifact")
@click.argument("folder_id")
@click.argument("name")
@click.option("--template", "template_id", required=True, help="Template id.")
@click.option("--state", "state_id", help="State id.")
@click.option("--automated/--manual", default=False, help="Automation flag.")
@click.option("--estimate", type=click.IntRange(min=0), help="Estimate in seconds.")
@click.option(
    "--step",
    "steps",
    multiple=True,
    type=(str, str),
    metavar="ACTION EXPECTED",
    help="Append a step (repeatable).",
)
@actor_option
def create_artifact(  # pylint: disable=too-many-arguments,too-many-positional-arguments
    folder_id: str,
    name: str,
    template_id: str,
    state_id: str | None,
    automated: bool,
    estimate: int | None,
    steps: tuple[tuple[str, str], ...],
    actor_id: str,
) -> None:
    """Create an artifact (version 1) in a folder."""
    with casebook_errors():
        artifact_id = _app().message_bus.handle(
            commands.CreateArtifact(
                actor_id=actor_id,
                folder_id=folder_id,
                name=name,
                template_id=template_id,
                state_id=state_id,
                automated=automated,
                estimate=estimate,
                steps=tuple(Step(action=a, expected_result=e) for a, e in steps),
            )
        )
    click.echo(artifact_id)


@repo.command("update-artifact")
@click.argument("artifact_id")
@click.option("--name", help="New name.")
@click.option("--state", "state_id", help="New state id.")
@click.option("--clear-state", is_flag=True, help="Clear the state.")
@click.option("--automated/--manual", default=None, help="Automation flag.")
@click.option("--expected-version", type=int, help="Fail unless head matches.")
@actor_option
def update_artifact(  # pylint: disable=too-many-arguments,too-many-positional-arguments
    artifact_id: str,
    name: str | None,
    state_id: str | None,
    clear_state: bool,
    automated: bool | None,
    expected_version: int | None,
    actor_id: str,
) -> None:
    """Edit versioned content; prints the resulting version number."""
    if clear_state and state_id:
        raise click.UsageError("--state and --clear-state are mutually exclusive")
    patch = ArtifactPatch(
        name=UNSET if name is None else name,
        state_id=None if clear_state else (UNSET if state_id is None else state_id),
        automated=UNSET if automated is None else automated,
    )
    with casebook_errors():
        version = _app().message_bus.handle(
            commands.UpdateArtifact(
                actor_id=actor_id,
                artifact_id=artifact_id,
                patch=patch,
                expected_version=expected_version,
            )
        )
    click.echo(version)


@repo.command("create-tag")
@click.argument("name")
@actor_option
def create_tag(name: str, actor_id: str) -> None:
    """Create a tag, or restore a deleted tag of the same name."""
    with casebook_errors():
        tag_id = _app().message_bus.handle(
            commands.CreateTag(actor_id=actor_id, name=name)
        )
    click.echo(tag_id)


@repo.command("tag")
@click.argument("artifact_id")
@click.argument("tag_id")
@click.option("--remove", is_flag=True, help="Detach instead of attach.")
@actor_option
def tag(artifact_id: str, tag_id: str, remove: bool, actor_id: str) -> None:
    """Attach (or detach) a tag. Creates no version."""
    cmd_type = commands.DetachTag if remove else commands.AttachTag
    with casebook_errors():
        _app().message_bus.handle(
            cmd_type(actor_id=actor_id, artifact_id=artifact_id, tag_id=tag_id)
        )


# ============================================================================
#                                  Reads
# ============================================================================


@repo.command()
def projects() -> None:
    """List projects."""
    table = Table("Project", "Name", "Root folder")
    for project in _app().queries.projects.list_all():
        table.add_row(
            project.project_id, escape(project.name), project.root_folder_id
        )
    _console().print(table)


def _add_nodes(branch: Tree, node: FolderNode) -> None:
    for child in node.children:
        label = f"{escape(child.folder.name)} [dim]({child.folder.folder_id})[/dim]"
        _add_nodes(branch.add(label), child)


@repo.command()
@click.argument("project_id")
def tree(project_id: str) -> None:
    """Show the project's folder tree."""
    with casebook_errors():
        root = _app().queries.folders.tree(project_id)
    name = escape(root.folder.name)
    rendered = Tree(f"[bold]{name}[/bold] [dim]({root.folder.folder_id})[/dim]")
    _add_nodes(rendered, root)
    _console().print(rendered)


@repo.command()
@click.argument("artifact_id")
def history(artifact_id: str) -> None:
    """List an artifact's versions."""
    with casebook_errors():
        versions = _app().queries.history.list_versions(artifact_id)
    table = Table("Version", "Name", "Created at", "By")
    for version in versions:
        table.add_row(
            str(version.number),
            escape(version.content.name),
            version.created_at.isoformat(timespec="seconds"),
            version.created_by,
        )
    _console().print(table)


def _diff_table(changes: list[FieldChange]) -> Table:
    table = Table("Field", "Change", "Old", "New")
    for change in changes:
        field = change.field
        if change.position is not None:
            field = f"{field}[{change.position + 1}]"
        style = _KIND_STYLES[change.kind]
        table.add_row(
            field,
            f"[{style}]{change.kind.value}[/{style}]",
            _fmt(change.old_value),
            _fmt(change.new_value),
        )
    return table


@repo.command()
@click.argument("artifact_id")
@click.argument("version", type=int)
@click.option("--against", type=int, help="Compare with this older version.")
@click.option("--all", "include_unchanged", is_flag=True, help="Show unchanged fields.")
def diff(
    artifact_id: str, version: int, against: int | None, include_unchanged: bool
) -> None:
    """Show what VERSION changed (against its predecessor by default)."""
    app = _app()
    with casebook_errors():
        if against is None:
            changes = app.queries.history.diff(
                artifact_id, version, include_unchanged=include_unchanged
            )
        else:
            changes = app.queries.history.diff_between(
                artifact_id, against, version, include_unchanged=include_unchanged
            )
    if not changes:
        click.echo("No changes")
        return
    _console().print(_diff_table(changes))


@repo.command()
def tags() -> None:
    """List active tags with usage counts."""
    app = _app()
    table = Table("Tag", "Name", "Artifacts")
    for active in app.queries.tags.list_active():
        usage = app.queries.tags.usage(active.tag_id)
        table.add_row(active.tag_id, escape(active.name), str(usage))
    _console().print(table)


@repo.command()
@click.argument("project_id")
@click.option(
    "--dimension",
    type=click.Choice([k.value for k in DimensionKind], case_sensitive=False),
    default=DimensionKind.FOLDER.value,
    show_default=True,
)
@click.option("--field-id", help="Custom field id (with --dimension custom_field).")
@click.option(
    "--field-kind",
    type=click.Choice([k.value for k in FieldKind], case_sensitive=False),
    help="Custom field value kind (with --dimension custom_field).",
)
@click.option("--select", "selections", multiple=True, help="Bucket key (repeatable).")
@click.option("--folder", "folder_id", help="Folder to scope to (folder dimension).")
@click.option("--subfolders", is_flag=True, help="Include subfolders of --folder.")
@click.option("--search", default="", help="Case-insensitive name search.")
@click.option("--sort", "sort_column", default="order", show_default=True)
@click.option("--desc", is_flag=True, help="Sort descending.")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--page-size", type=click.IntRange(min=1), help="Rows per page.")
def view(  # pylint: disable=too-many-arguments,too-many-positional-arguments,too-many-locals
    project_id: str,
    dimension: str,
    field_id: str | None,
    field_kind: str | None,
    selections: tuple[str, ...],
    folder_id: str | None,
    subfolders: bool,
    search: str,
    sort_column: str,
    desc: bool,
    page: int,
    page_size: int | None,
) -> None:
    """Group, filter and page a project's artifacts."""
    app = _app()
    with casebook_errors():
        kind = DimensionKind(dimension.lower())
        dim = (
            Dimension.custom_field(field_id or "", FieldKind(field_kind.lower()))
            if kind is DimensionKind.CUSTOM_FIELD and field_kind
            else Dimension(kind)
        )
        state = app.views.initial_state(dim)
        for key in selections:
            state = state.click_bucket(key, multi=True)
        if folder_id:
            state = state.with_folder(folder_id, include_subfolders=subfolders)
        state = state.with_search(search).with_sort(sort_column, descending=desc)
        if page_size:
            state = state.with_page_size(page_size)
        result = app.views.query(project_id, state.with_page(page))

    console = _console()
    buckets = Table("Bucket", "Label", "Count", title=dim.key)
    for bucket in result.buckets:
        marker = "*" if bucket.selected else ""
        buckets.add_row(
            f"{marker}{bucket.key}", escape(bucket.label), str(bucket.count)
        )
    console.print(buckets)

    items = Table("Artifact", "Name", "Version", "Template", "State")
    for artifact in result.page.items:
        items.add_row(
            artifact.artifact_id,
            escape(artifact.content.name),
            str(artifact.current_version),
            artifact.content.template_id,
            _fmt(artifact.content.state_id),
        )
    console.print(items)
    if result.page.show_pagination:
        click.echo(
            f"Page {result.page.page}/{result.page.total_pages} "
            f"({result.page.total_items} artifacts)"
        )
