from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from registry_explorer.cli.connection import build_client, build_connection

serve_app = typer.Typer(help="Start servers.")
console = Console(stderr=True)


@serve_app.command("mcp")
def mcp(
    url: Annotated[str | None, typer.Option(help="Registry base URL.")] = None,
    fixture: Annotated[Path | None, typer.Option(exists=True, dir_okay=False, help="JSON fixture to serve.")] = None,
    token: Annotated[str | None, typer.Option(help="Bearer token.")] = None,
    transport: str = "stdio",
) -> None:
    """Start the MCP server."""
    from registry_explorer.core.tree import RegistryTreeDataSource
    from registry_explorer.mcp.server import create_mcp_server

    source = RegistryTreeDataSource(build_client(url, fixture))
    server = create_mcp_server(source, build_connection(url, fixture, token=token))
    console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
