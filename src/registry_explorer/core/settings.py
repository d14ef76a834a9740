"""User-facing explorer options.

Values come from ``REGISTRY_EXPLORER_*`` environment variables. The tree
data source calls its settings provider on every resolution, so nothing
here is cached.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ENV_PREFIX = "REGISTRY_EXPLORER_"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class GroupSort(str, Enum):
    ALPHABETICAL = "alphabetical"
    MODIFIED = "modified"
    ARTIFACT_COUNT = "artifact-count"


class ArtifactSort(str, Enum):
    ALPHABETICAL = "alphabetical"
    MODIFIED = "modified"
    TYPE = "type"


class BranchSort(str, Enum):
    SYSTEM_FIRST = "system-first"
    ALPHABETICAL = "alphabetical"


class ExplorerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    group_sort: GroupSort = GroupSort.ALPHABETICAL
    artifact_sort: ArtifactSort = ArtifactSort.ALPHABETICAL
    branch_sort: BranchSort = BranchSort.SYSTEM_FIRST
    hide_empty_groups: bool = False
    hide_disabled_artifacts: bool = False
    artifact_types: tuple[str, ...] = ()
    hide_disabled_versions: bool = False
    hide_deprecated_versions: bool = False
    reverse_version_order: bool = False
    truncate_descriptions: bool = True
    truncate_length: int = 50
    search_limit: int = 50
    reveal_delay: float = 0.5


def _env(name: str) -> str | None:
    value = os.getenv(_ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in _TRUE_VALUES


def _env_parsed(name: str, parse: Callable[[str], T], default: T) -> T:
    value = _env(name)
    if value is None:
        return default
    try:
        return parse(value)
    except ValueError:
        logger.warning("Ignoring invalid %s%s=%r; using %r", _ENV_PREFIX, name, value, default)
        return default


def _env_list(name: str) -> tuple[str, ...]:
    value = _env(name)
    if value is None:
        return ()
    return tuple(part.strip().upper() for part in value.split(",") if part.strip())


def load_settings() -> ExplorerSettings:
    defaults = ExplorerSettings()
    return ExplorerSettings(
        group_sort=_env_parsed("GROUP_SORT", GroupSort, defaults.group_sort),
        artifact_sort=_env_parsed("ARTIFACT_SORT", ArtifactSort, defaults.artifact_sort),
        branch_sort=_env_parsed("BRANCH_SORT", BranchSort, defaults.branch_sort),
        hide_empty_groups=_env_bool("HIDE_EMPTY_GROUPS", defaults.hide_empty_groups),
        hide_disabled_artifacts=_env_bool("HIDE_DISABLED_ARTIFACTS", defaults.hide_disabled_artifacts),
        artifact_types=_env_list("ARTIFACT_TYPES"),
        hide_disabled_versions=_env_bool("HIDE_DISABLED_VERSIONS", defaults.hide_disabled_versions),
        hide_deprecated_versions=_env_bool("HIDE_DEPRECATED_VERSIONS", defaults.hide_deprecated_versions),
        reverse_version_order=_env_bool("REVERSE_VERSION_ORDER", defaults.reverse_version_order),
        truncate_descriptions=_env_bool("TRUNCATE_DESCRIPTIONS", defaults.truncate_descriptions),
        truncate_length=_env_parsed("TRUNCATE_LENGTH", int, defaults.truncate_length),
        search_limit=_env_parsed("SEARCH_LIMIT", int, defaults.search_limit),
        reveal_delay=_env_parsed("REVEAL_DELAY", float, defaults.reveal_delay),
    )
