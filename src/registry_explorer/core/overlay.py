"""Search-filter overlay for the root of the tree.

While a filter is active the root level is a flattened search, regrouped
by owning group. Only the root is reshaped: a synthetic group node has the
same identity as the real one, so expanding it goes through the normal,
unfiltered resolution path.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from registry_explorer.core.policies import filter_groups, is_artifact_visible, is_version_visible
from registry_explorer.core.ports.registry import RegistryClient
from registry_explorer.core.settings import ExplorerSettings
from registry_explorer.core.state import ExplorerState, FilterState, SearchMode
from registry_explorer.models import GroupMetadata, Node, group_metadata, group_node, placeholder

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"

_EMPTY_LABELS: dict[SearchMode, str] = {
    SearchMode.ARTIFACT: "No matching artifacts",
    SearchMode.VERSION: "No matching versions",
    SearchMode.GROUP: "No matching groups",
}


class FilterOverlay:
    def __init__(self, state: ExplorerState, client: RegistryClient) -> None:
        self._state = state
        self._client = client

    @property
    def active(self) -> bool:
        return self._state.filter is not None

    @property
    def current(self) -> FilterState | None:
        return self._state.filter

    def description(self) -> str | None:
        if self._state.filter is None:
            return None
        return self._state.filter.describe()

    def activate(self, mode: SearchMode, criteria: Mapping[str, str]) -> int:
        filter_state = FilterState(mode=SearchMode(mode), criteria=dict(criteria))
        logger.info("Applying search filter (%s): %s", filter_state.mode.value, filter_state.describe())
        return self._state.apply_filter(filter_state)

    def clear(self) -> int:
        logger.info("Clearing search filter")
        return self._state.clear_filter()

    async def resolve_root(self, settings: ExplorerSettings) -> list[Node]:
        filter_state = self._state.filter
        if filter_state is None:
            return []

        if filter_state.mode is SearchMode.ARTIFACT:
            nodes = await self._artifact_groups(filter_state, settings)
        elif filter_state.mode is SearchMode.VERSION:
            nodes = await self._version_groups(filter_state, settings)
        else:
            nodes = await self._matching_groups(filter_state, settings)

        if not nodes:
            return [_no_matches(filter_state)]
        return nodes

    async def _artifact_groups(self, filter_state: FilterState, settings: ExplorerSettings) -> list[Node]:
        hits = await self._client.search_artifacts(filter_state.criteria, limit=settings.search_limit)
        matches: dict[str, int] = {}
        for artifact in hits:
            if not is_artifact_visible(artifact.artifact_type, artifact.state, settings):
                continue
            group_id = artifact.group_id or DEFAULT_GROUP
            matches[group_id] = matches.get(group_id, 0) + 1
        logger.debug("Artifact search matched %d group(s)", len(matches))
        return [
            group_node(group_id, GroupMetadata(artifact_count=count, match_count=count))
            for group_id, count in matches.items()
        ]

    async def _version_groups(self, filter_state: FilterState, settings: ExplorerSettings) -> list[Node]:
        hits = await self._client.search_versions(filter_state.criteria, limit=settings.search_limit)
        skeleton: dict[str, dict[str, int]] = {}
        for version in hits:
            if not is_version_visible(version.state, settings):
                continue
            artifacts = skeleton.setdefault(version.group_id or DEFAULT_GROUP, {})
            artifacts[version.artifact_id] = artifacts.get(version.artifact_id, 0) + 1
        logger.debug("Version search matched %d group(s)", len(skeleton))
        return [
            group_node(group_id, GroupMetadata(artifact_count=len(artifacts), match_count=sum(artifacts.values())))
            for group_id, artifacts in skeleton.items()
        ]

    async def _matching_groups(self, filter_state: FilterState, settings: ExplorerSettings) -> list[Node]:
        hits = await self._client.search_groups(filter_state.criteria, limit=settings.search_limit)
        nodes = [group_node(group.group_id, group_metadata(group)) for group in hits]
        return filter_groups(nodes, settings)


def _no_matches(filter_state: FilterState) -> Node:
    label = _EMPTY_LABELS[filter_state.mode]
    return placeholder(label, description=f"No {filter_state.mode.value}s found: {filter_state.describe()}")
