"""Expand the matches of a freshly applied search filter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from registry_explorer.core.ports.host import TreeHost
from registry_explorer.core.state import SearchMode
from registry_explorer.models import Node, NodeKind

if TYPE_CHECKING:
    from registry_explorer.core.tree import RegistryTreeDataSource

logger = logging.getLogger(__name__)


async def _reveal(host: TreeHost, node: Node, depth: int) -> bool:
    try:
        await host.reveal_and_expand(node, depth)
    except Exception:
        logger.warning("Could not reveal %s %r", node.kind.value, node.label, exc_info=True)
        return False
    return True


async def reveal_matches(source: RegistryTreeDataSource, host: TreeHost, mode: SearchMode) -> int:
    """Reveal every matched group, and in version mode their artifacts too.

    Returns the number of nodes successfully revealed. A failure on one
    node never stops the walk over its siblings.
    """
    revealed = 0
    for group in await source.get_children():
        if group.kind is not NodeKind.GROUP:
            continue
        if await _reveal(host, group, 1):
            revealed += 1
        if mode is not SearchMode.VERSION:
            continue
        for artifact in await source.get_children(group):
            if artifact.kind is NodeKind.ARTIFACT and await _reveal(host, artifact, 1):
                revealed += 1
    logger.debug("Revealed %d node(s) for %s filter", revealed, mode.value)
    return revealed
