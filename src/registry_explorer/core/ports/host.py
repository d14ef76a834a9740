from typing import Protocol

from registry_explorer.models import Node


class TreeHost(Protocol):
    async def reveal_and_expand(self, node: Node, depth: int) -> None: ...
