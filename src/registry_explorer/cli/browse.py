import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from registry_explorer.cli.connection import build_client, build_connection, parse_criteria
from registry_explorer.cli.render import ConsoleTreeHost, build_tree
from registry_explorer.core.ports.registry import RegistryClient
from registry_explorer.core.settings import load_settings
from registry_explorer.core.state import SearchMode
from registry_explorer.core.tree import RegistryTreeDataSource

console = Console()

UrlOption = Annotated[str | None, typer.Option(help="Registry base URL, e.g. http://localhost:8080.")]
FixtureOption = Annotated[
    Path | None, typer.Option(exists=True, dir_okay=False, help="JSON fixture to browse instead of a live registry.")
]
CriteriaOption = Annotated[list[str] | None, typer.Option(help="Search criterion as key=value (repeatable).")]


def tree(
    url: UrlOption = None,
    fixture: FixtureOption = None,
    mode: Annotated[SearchMode | None, typer.Option(help="Apply a search filter in this mode.")] = None,
    criteria: CriteriaOption = None,
    depth: Annotated[int, typer.Option(min=1, max=4, help="Levels to expand below the root.")] = 1,
    username: Annotated[str | None, typer.Option(help="Basic-auth user name.")] = None,
    password: Annotated[str | None, typer.Option(help="Basic-auth password.")] = None,
    token: Annotated[str | None, typer.Option(help="Bearer token.")] = None,
) -> None:
    """Print the registry tree, optionally reshaped by a search filter."""
    parsed = parse_criteria(criteria or [])
    if mode is None and parsed:
        raise typer.BadParameter("--criteria requires --mode", param_hint="--criteria")
    client = build_client(url, fixture)
    connection = build_connection(url, fixture, username, password, token)
    # The console has no render pass to wait for before revealing.
    settings = load_settings().model_copy(update={"reveal_delay": 0.0})

    async def _run() -> None:
        source = RegistryTreeDataSource(client, settings=lambda: settings)
        host = ConsoleTreeHost(source)
        source.attach_host(host)
        await source.connect(connection)
        try:
            if mode is not None:
                source.apply_search_filter(mode, parsed)
                if source.pending_reveal is not None:
                    await source.pending_reveal
            console.print(await build_tree(source, host, depth, settings))
        finally:
            await source.dispose()
            await source.disconnect()

    asyncio.run(_run())


def search(
    mode: Annotated[SearchMode, typer.Argument(help="What to search for.")],
    url: UrlOption = None,
    fixture: FixtureOption = None,
    criteria: CriteriaOption = None,
    limit: Annotated[int | None, typer.Option(help="Max results (defaults to the configured search limit).")] = None,
) -> None:
    """List raw search hits without regrouping them."""
    parsed = parse_criteria(criteria or [])
    client = build_client(url, fixture)
    connection = build_connection(url, fixture)
    max_rows = limit or load_settings().search_limit

    async def _run() -> None:
        await client.open(connection)
        try:
            table = await _search_table(client, mode, parsed, max_rows)
        finally:
            await client.close()
        console.print(table)
        console.print(f"({table.row_count} rows)")

    asyncio.run(_run())


async def _search_table(client: RegistryClient, mode: SearchMode, criteria: dict[str, str], limit: int) -> Table:
    table = Table(show_lines=False)
    if mode is SearchMode.GROUP:
        for header in ("groupId", "artifacts", "description"):
            table.add_column(header)
        for group in await client.search_groups(criteria, limit=limit):
            table.add_row(group.group_id, str(group.artifact_count or 0), group.description or "")
    elif mode is SearchMode.ARTIFACT:
        for header in ("groupId", "artifactId", "type", "state"):
            table.add_column(header)
        for artifact in await client.search_artifacts(criteria, limit=limit):
            table.add_row(
                artifact.group_id or "default", artifact.artifact_id, artifact.artifact_type or "", artifact.state or ""
            )
    else:
        for header in ("groupId", "artifactId", "version", "state"):
            table.add_column(header)
        for version in await client.search_versions(criteria, limit=limit):
            table.add_row(version.group_id or "default", version.artifact_id, version.version, version.state or "")
    return table
