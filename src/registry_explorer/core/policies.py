"""Sort and visibility rules for sibling lists.

Every function returns a new list and leaves its input untouched. Sorts
start from label order and then apply a stable sort on the configured
key, so ties always fall back to label ordering.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from registry_explorer.core.settings import ArtifactSort, BranchSort, ExplorerSettings, GroupSort
from registry_explorer.models import (
    ArtifactMetadata,
    BranchMetadata,
    GroupMetadata,
    Node,
    VersionMetadata,
)

_DISABLED = "DISABLED"
_DEPRECATED = "DEPRECATED"


def _by_label(nodes: Iterable[Node]) -> list[Node]:
    return sorted(nodes, key=lambda n: (n.label.casefold(), n.label, n.id or ""))


def _recency_key(modified_on: datetime | None) -> tuple[bool, float]:
    # Undated entries sort after dated ones when reversed.
    if modified_on is None:
        return (False, 0.0)
    return (True, modified_on.timestamp())


def sort_groups(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    ordered = _by_label(nodes)
    if settings.group_sort is GroupSort.MODIFIED:
        ordered.sort(key=lambda n: _recency_key(_group_meta(n).modified_on), reverse=True)
    elif settings.group_sort is GroupSort.ARTIFACT_COUNT:
        ordered.sort(key=lambda n: _group_meta(n).artifact_count or 0, reverse=True)
    return ordered


def sort_artifacts(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    ordered = _by_label(nodes)
    if settings.artifact_sort is ArtifactSort.MODIFIED:
        ordered.sort(key=lambda n: _recency_key(_artifact_meta(n).modified_on), reverse=True)
    elif settings.artifact_sort is ArtifactSort.TYPE:
        ordered.sort(key=lambda n: _artifact_meta(n).artifact_type or "")
    return ordered


def sort_branches(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    ordered = _by_label(nodes)
    if settings.branch_sort is BranchSort.SYSTEM_FIRST:
        ordered.sort(key=lambda n: not _branch_meta(n).system_defined)
    return ordered


def filter_groups(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    if not settings.hide_empty_groups:
        return list(nodes)
    # An unknown count is not the same as an empty group.
    return [n for n in nodes if _group_meta(n).artifact_count != 0]


def is_artifact_visible(artifact_type: str | None, state: str | None, settings: ExplorerSettings) -> bool:
    if settings.hide_disabled_artifacts and state == _DISABLED:
        return False
    if settings.artifact_types and (artifact_type or "").upper() not in settings.artifact_types:
        return False
    return True


def filter_artifacts(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    return [
        n for n in nodes if is_artifact_visible(_artifact_meta(n).artifact_type, _artifact_meta(n).state, settings)
    ]


def is_version_visible(state: str | None, settings: ExplorerSettings) -> bool:
    if settings.hide_disabled_versions and state == _DISABLED:
        return False
    if settings.hide_deprecated_versions and state == _DEPRECATED:
        return False
    return True


def filter_versions(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    return [n for n in nodes if is_version_visible(_version_meta(n).state, settings)]


def apply_group_policies(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    return sort_groups(filter_groups(nodes, settings), settings)


def apply_artifact_policies(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    return sort_artifacts(filter_artifacts(nodes, settings), settings)


def apply_branch_policies(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    return sort_branches(nodes, settings)


def apply_version_policies(nodes: Sequence[Node], settings: ExplorerSettings) -> list[Node]:
    """Versions keep registry order (optionally reversed); only visibility applies."""
    ordered = list(reversed(nodes)) if settings.reverse_version_order else list(nodes)
    return filter_versions(ordered, settings)


def truncate_description(description: str | None, settings: ExplorerSettings) -> str | None:
    if description is None or not settings.truncate_descriptions:
        return description
    if len(description) > settings.truncate_length:
        return description[: settings.truncate_length] + "..."
    return description


def _group_meta(node: Node) -> GroupMetadata:
    assert isinstance(node.metadata, GroupMetadata)
    return node.metadata


def _artifact_meta(node: Node) -> ArtifactMetadata:
    assert isinstance(node.metadata, ArtifactMetadata)
    return node.metadata


def _branch_meta(node: Node) -> BranchMetadata:
    assert isinstance(node.metadata, BranchMetadata)
    return node.metadata


def _version_meta(node: Node) -> VersionMetadata:
    assert isinstance(node.metadata, VersionMetadata)
    return node.metadata
