"""FastMCP server exposing the registry tree."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from registry_explorer.core.state import SearchMode
from registry_explorer.core.tree import RegistryTreeDataSource
from registry_explorer.models import ConnectionInfo, Node, artifact_node, branch_node, group_node


def _node_for(group_id: str | None, artifact_id: str | None, branch_id: str | None) -> Node | None:
    if branch_id is not None:
        if group_id is None or artifact_id is None:
            raise ValueError("branch_id requires group_id and artifact_id")
        return branch_node(group_id, artifact_id, branch_id)
    if artifact_id is not None:
        if group_id is None:
            raise ValueError("artifact_id requires group_id")
        return artifact_node(group_id, artifact_id)
    if group_id is not None:
        return group_node(group_id)
    return None


def node_to_dict(node: Node) -> dict[str, Any]:
    return {
        "kind": node.kind.value,
        "label": node.label,
        "id": node.id,
        "parent_id": node.parent_id,
        "group_id": node.group_id,
        "artifact_id": node.artifact_id,
        "leaf": node.is_leaf,
        "metadata": node.metadata.model_dump(mode="json", exclude_none=True, exclude={"kind"}),
    }


def create_mcp_server(source: RegistryTreeDataSource, connection: ConnectionInfo | None = None) -> FastMCP:
    """Create a FastMCP server wired to the given tree data source.

    When ``connection`` is given, the source connects lazily on the first
    tool call so the HTTP client lives on the server's event loop.
    """

    mcp = FastMCP("registry-explorer", instructions="Browse a schema registry as a group/artifact/branch tree.")

    async def _ensure_connected() -> None:
        if connection is not None and not source.state.connected:
            await source.connect(connection)

    @mcp.tool()
    async def children(
        group_id: str | None = None,
        artifact_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """List the children of a tree position (the root when no ids are given)."""
        await _ensure_connected()
        nodes = await source.get_children(_node_for(group_id, artifact_id, branch_id))
        return [node_to_dict(n) for n in nodes]

    @mcp.tool()
    async def apply_filter(mode: str, criteria: dict[str, str]) -> str:
        """Reshape the root into search matches (mode: artifact, version or group)."""
        await _ensure_connected()
        source.apply_search_filter(SearchMode(mode), criteria)
        return source.get_filter_description() or ""

    @mcp.tool()
    async def clear_filter() -> str:
        """Remove the active search filter."""
        source.clear_search_filter()
        return "Filter cleared"

    @mcp.tool()
    async def filter_status() -> dict[str, Any]:
        """Report whether a search filter is active and what it matches on."""
        current = source.state.filter
        return {
            "active": source.has_active_filter(),
            "mode": current.mode.value if current else None,
            "description": source.get_filter_description(),
        }

    return mcp
