"""Lazily-resolved registry tree for a host widget.

Implements the host contract: ``get_children``, ``get_parent``, a
payload-free change notification, and the filter controls that feed the
overlay and the reveal walk. Nodes are rebuilt on every call; nothing is
cached between resolutions.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Mapping

from registry_explorer.core.overlay import FilterOverlay
from registry_explorer.core.policies import (
    apply_artifact_policies,
    apply_branch_policies,
    apply_group_policies,
    apply_version_policies,
)
from registry_explorer.core.ports.host import TreeHost
from registry_explorer.core.ports.registry import RegistryClient
from registry_explorer.core.reveal import reveal_matches
from registry_explorer.core.settings import ExplorerSettings, load_settings
from registry_explorer.core.state import ExplorerState, SearchMode
from registry_explorer.models import (
    ConnectionInfo,
    Node,
    NodeKind,
    RuleSummary,
    artifact_metadata,
    artifact_node,
    branch_metadata,
    branch_node,
    group_metadata,
    group_node,
    placeholder,
    version_metadata,
    version_node,
)

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]
SettingsProvider = Callable[[], ExplorerSettings]


class RegistryTreeDataSource:
    def __init__(
        self,
        client: RegistryClient,
        state: ExplorerState | None = None,
        settings: SettingsProvider = load_settings,
        host: TreeHost | None = None,
    ) -> None:
        self._client = client
        self.state = state if state is not None else ExplorerState()
        self._settings = settings
        self._host = host
        self._listeners: list[ChangeListener] = []
        self._overlay = FilterOverlay(self.state, client)
        self._reveal_task: asyncio.Task[None] | None = None

    # -- change notification ---------------------------------------------

    def on_did_change(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def refresh(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Error in tree change listener")

    def attach_host(self, host: TreeHost | None) -> None:
        self._host = host

    # -- connection ------------------------------------------------------

    async def connect(self, connection: ConnectionInfo) -> None:
        await self._client.open(connection)
        self.state.connect(connection)
        logger.info("Connected to registry %s (%s)", connection.name, connection.url)
        self.refresh()

    async def disconnect(self) -> None:
        await self._client.close()
        self.state.disconnect()
        logger.info("Disconnected from registry")
        self.refresh()

    # -- filter controls -------------------------------------------------

    def apply_search_filter(self, mode: SearchMode, criteria: Mapping[str, str]) -> None:
        generation = self._overlay.activate(mode, criteria)
        self.refresh()
        self._schedule_reveal(generation)

    def clear_search_filter(self) -> None:
        self._overlay.clear()
        self._cancel_reveal()
        self.refresh()

    def has_active_filter(self) -> bool:
        return self._overlay.active

    def get_filter_description(self) -> str | None:
        return self._overlay.description()

    @property
    def pending_reveal(self) -> asyncio.Task[None] | None:
        return self._reveal_task

    async def dispose(self) -> None:
        task = self._reveal_task
        self._cancel_reveal()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._listeners.clear()

    def _schedule_reveal(self, generation: int) -> None:
        self._cancel_reveal()
        if self._host is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; skipping reveal for generation %d", generation)
            return
        self._reveal_task = loop.create_task(self._reveal_after_delay(generation))

    def _cancel_reveal(self) -> None:
        if self._reveal_task is not None and not self._reveal_task.done():
            self._reveal_task.cancel()
        self._reveal_task = None

    async def _reveal_after_delay(self, generation: int) -> None:
        await asyncio.sleep(self._settings().reveal_delay)
        filter_state = self.state.filter
        if generation != self.state.generation or filter_state is None or self._host is None:
            logger.debug("Skipping stale reveal for generation %d", generation)
            return
        await reveal_matches(self, self._host, filter_state.mode)

    # -- host contract ---------------------------------------------------

    async def get_children(self, node: Node | None = None) -> list[Node]:
        if not self.state.connected:
            return [placeholder("Not connected", description="Connect to a registry to browse its content")]

        if node is not None:
            _check_resolvable(node)
        settings = self._settings()

        if node is None:
            if self._overlay.active:
                return await self._guarded("search results", self._overlay.resolve_root(settings))
            return await self._guarded("groups", self._groups(settings))
        if node.kind is NodeKind.GROUP:
            return await self._guarded("artifacts", self._artifacts(node, settings))
        if node.kind is NodeKind.ARTIFACT:
            return await self._guarded("branches", self._branches(node, settings))
        if node.kind is NodeKind.BRANCH:
            return await self._guarded("versions", self._versions(node, settings))
        return []

    def get_parent(self, node: Node) -> Node | None:
        """Rebuild the minimal parent of ``node`` from its own coordinates."""
        if node.kind is NodeKind.ARTIFACT and node.parent_id is not None:
            return group_node(node.parent_id)
        if node.kind is NodeKind.BRANCH and node.parent_id is not None and node.group_id is not None:
            return artifact_node(node.group_id, node.parent_id)
        if (
            node.kind is NodeKind.VERSION
            and node.parent_id is not None
            and node.group_id is not None
            and node.artifact_id is not None
        ):
            return branch_node(node.group_id, node.artifact_id, node.parent_id)
        return None

    # -- resolution ------------------------------------------------------

    async def _guarded(self, what: str, fetch: Awaitable[list[Node]]) -> list[Node]:
        try:
            return await fetch
        except Exception as exc:
            logger.error("Error loading %s: %s", what, exc)
            return [placeholder(f"Error loading {what}", description=_user_message(exc), error=str(exc))]

    async def _groups(self, settings: ExplorerSettings) -> list[Node]:
        groups = await self._client.list_groups()
        rules = await asyncio.gather(*(self._group_rules(g.group_id) for g in groups))
        nodes = [group_node(g.group_id, group_metadata(g, r)) for g, r in zip(groups, rules, strict=True)]
        return apply_group_policies(nodes, settings)

    async def _artifacts(self, group: Node, settings: ExplorerSettings) -> list[Node]:
        assert group.id is not None
        artifacts = await self._client.list_artifacts(group.id)
        rules = await asyncio.gather(*(self._artifact_rules(group.id, a.artifact_id) for a in artifacts))
        nodes = [
            artifact_node(group.id, a.artifact_id, artifact_metadata(a, r))
            for a, r in zip(artifacts, rules, strict=True)
        ]
        return apply_artifact_policies(nodes, settings)

    async def _branches(self, artifact: Node, settings: ExplorerSettings) -> list[Node]:
        group_id, artifact_id = artifact.group_id or artifact.parent_id, artifact.id
        assert group_id is not None and artifact_id is not None
        branches = await self._client.list_branches(group_id, artifact_id)
        if not branches:
            return [placeholder("No branches", description=f"{group_id}/{artifact_id} has no branches")]
        nodes = [branch_node(group_id, artifact_id, b.branch_id, branch_metadata(b)) for b in branches]
        return apply_branch_policies(nodes, settings)

    async def _versions(self, branch: Node, settings: ExplorerSettings) -> list[Node]:
        group_id, artifact_id = branch.group_id, branch.parent_id
        assert branch.id is not None and group_id is not None and artifact_id is not None
        versions = await self._client.list_branch_versions(group_id, artifact_id, branch.id)
        nodes = [
            version_node(group_id, artifact_id, branch.id, v.version, version_metadata(v)) for v in versions
        ]
        nodes = apply_version_policies(nodes, settings)
        if not nodes:
            return [placeholder("No versions", description=f"Branch {branch.id!r} has no visible versions")]
        return nodes

    async def _group_rules(self, group_id: str) -> tuple[RuleSummary, ...]:
        try:
            rule_types = await self._client.list_group_rules(group_id)
        except Exception as exc:
            logger.debug("No rules for group %s: %s", group_id, exc)
            return ()
        summaries: list[RuleSummary] = []
        for rule_type in rule_types:
            try:
                rule = await self._client.get_group_rule(group_id, rule_type)
            except Exception as exc:
                logger.debug("Skipping %s rule for group %s: %s", rule_type, group_id, exc)
                continue
            summaries.append(RuleSummary(rule_type=rule.rule_type, config=rule.config))
        return tuple(summaries)

    async def _artifact_rules(self, group_id: str, artifact_id: str) -> tuple[RuleSummary, ...]:
        try:
            rule_types = await self._client.list_artifact_rules(group_id, artifact_id)
        except Exception as exc:
            logger.debug("No rules for artifact %s/%s: %s", group_id, artifact_id, exc)
            return ()
        summaries: list[RuleSummary] = []
        for rule_type in rule_types:
            try:
                rule = await self._client.get_artifact_rule(group_id, artifact_id, rule_type)
            except Exception as exc:
                logger.debug("Skipping %s rule for artifact %s/%s: %s", rule_type, group_id, artifact_id, exc)
                continue
            summaries.append(RuleSummary(rule_type=rule.rule_type, config=rule.config))
        return tuple(summaries)


def _check_resolvable(node: Node) -> None:
    if node.kind is NodeKind.PLACEHOLDER:
        raise ValueError(f"Placeholder node {node.label!r} cannot be resolved")
    if node.id is None:
        raise ValueError(f"{node.kind.value} node {node.label!r} has no id")
    if node.kind is NodeKind.ARTIFACT and (node.group_id or node.parent_id) is None:
        raise ValueError(f"Artifact node {node.label!r} has no group")
    if node.kind is NodeKind.BRANCH and (node.group_id is None or node.parent_id is None):
        raise ValueError(f"Branch node {node.label!r} is missing its group or artifact")


def _user_message(exc: Exception) -> str:
    return getattr(exc, "user_message", None) or "Check connection settings and try again"
