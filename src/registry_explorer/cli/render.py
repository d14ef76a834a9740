"""Console host: records reveals and renders the visible tree with rich."""

from __future__ import annotations

from rich.markup import escape
from rich.tree import Tree

from registry_explorer.core.policies import truncate_description
from registry_explorer.core.settings import ExplorerSettings
from registry_explorer.core.tree import RegistryTreeDataSource
from registry_explorer.models import (
    ArtifactMetadata,
    GroupMetadata,
    Node,
    NodeIdentity,
    NodeKind,
    PlaceholderMetadata,
    VersionMetadata,
)


class ConsoleTreeHost:
    """Implements ``TreeHost`` by remembering which positions are expanded.

    Revealing a node also expands every ancestor, found through the data
    source's ``get_parent``; a non-root node without a resolvable parent
    cannot be located and is rejected.
    """

    def __init__(self, source: RegistryTreeDataSource) -> None:
        self._source = source
        self.expanded: dict[NodeIdentity, int] = {}

    async def reveal_and_expand(self, node: Node, depth: int) -> None:
        if node.kind is NodeKind.PLACEHOLDER:
            raise LookupError(f"Placeholder {node.label!r} cannot be revealed")
        ancestors: list[Node] = []
        parent = self._source.get_parent(node)
        while parent is not None:
            ancestors.append(parent)
            parent = self._source.get_parent(parent)
        root = ancestors[-1] if ancestors else node
        if root.kind is not NodeKind.GROUP:
            raise LookupError(f"Cannot locate {node.kind.value} {node.label!r} in the tree")
        for ancestor in ancestors:
            self._expand(ancestor, 1)
        self._expand(node, depth)

    def expand_depth(self, node: Node) -> int:
        return self.expanded.get(node.identity, 0)

    def _expand(self, node: Node, depth: int) -> None:
        self.expanded[node.identity] = max(self.expanded.get(node.identity, 0), depth)


def format_node(node: Node, settings: ExplorerSettings) -> str:
    label = escape(node.label)
    meta = node.metadata
    if isinstance(meta, GroupMetadata):
        count = f" [dim]({meta.artifact_count})[/dim]" if meta.artifact_count else ""
        return f"[bold blue]{label}[/bold blue]{count}"
    if isinstance(meta, ArtifactMetadata):
        parts = [f"[bold]{label}[/bold]"]
        if meta.artifact_type:
            parts.append(f"[magenta]{escape(meta.artifact_type)}[/magenta]")
        if meta.state and meta.state != "ENABLED":
            parts.append(f"[yellow]{escape(meta.state.lower())}[/yellow]")
        description = truncate_description(meta.description, settings)
        if description:
            parts.append(f"[dim]{escape(description)}[/dim]")
        return " ".join(parts)
    if isinstance(meta, VersionMetadata):
        state = f" [yellow]{escape(meta.state.lower())}[/yellow]" if meta.state and meta.state != "ENABLED" else ""
        return f"{label}{state}"
    if isinstance(meta, PlaceholderMetadata):
        detail = f" [dim]{escape(meta.description)}[/dim]" if meta.description else ""
        return f"[italic yellow]{label}[/italic yellow]{detail}"
    return f"[cyan]{label}[/cyan]"


async def build_tree(
    source: RegistryTreeDataSource,
    host: ConsoleTreeHost,
    depth: int,
    settings: ExplorerSettings,
) -> Tree:
    """Render root children, ``depth`` levels deep plus every revealed subtree."""
    tree = Tree(escape(source.get_filter_description() or "Registry"))
    await _add_children(tree, source, host, None, depth, settings)
    return tree


async def _add_children(
    tree: Tree,
    source: RegistryTreeDataSource,
    host: ConsoleTreeHost,
    node: Node | None,
    levels: int,
    settings: ExplorerSettings,
) -> None:
    for child in await source.get_children(node):
        subtree = tree.add(format_node(child, settings))
        if child.is_leaf:
            continue
        remaining = max(levels - 1, host.expand_depth(child))
        if remaining > 0:
            await _add_children(subtree, source, host, child, remaining, settings)
