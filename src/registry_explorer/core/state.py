from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from registry_explorer.models import ConnectionInfo

logger = logging.getLogger(__name__)


class SearchMode(str, Enum):
    ARTIFACT = "artifact"
    VERSION = "version"
    GROUP = "group"


@dataclass(frozen=True)
class FilterState:
    mode: SearchMode
    criteria: dict[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        pairs = ", ".join(f'{key}="{value}"' for key, value in self.criteria.items())
        return f"Filtered by {pairs}"


@dataclass
class ExplorerState:
    """Connection and filter state owned by a single tree data source.

    ``generation`` advances on every filter change so a delayed reveal can
    tell whether the filter it was scheduled for is still current.
    """

    connected: bool = False
    connection: ConnectionInfo | None = None
    filter: FilterState | None = None
    generation: int = 0

    def connect(self, connection: ConnectionInfo) -> None:
        self.connection = connection
        self.connected = True

    def disconnect(self) -> None:
        self.connection = None
        self.connected = False

    def apply_filter(self, filter_state: FilterState) -> int:
        self.filter = filter_state
        self.generation += 1
        logger.debug("Filter generation %d: %s", self.generation, filter_state)
        return self.generation

    def clear_filter(self) -> int:
        self.filter = None
        self.generation += 1
        return self.generation
