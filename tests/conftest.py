"""Shared fixtures and helpers for tests."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from registry_explorer.core.settings import ExplorerSettings
from registry_explorer.core.tree import RegistryTreeDataSource
from registry_explorer.models import ConnectionInfo, Node
from registry_explorer.registry import InMemoryRegistryClient, load_fixture

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class RecordingHost:
    """``TreeHost`` that records reveals and can be told to fail on some labels."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.revealed: list[tuple[Node, int]] = []
        self.fail_on = fail_on or set()

    async def reveal_and_expand(self, node: Node, depth: int) -> None:
        if node.label in self.fail_on:
            raise LookupError(f"cannot locate {node.label}")
        self.revealed.append((node, depth))

    @property
    def labels(self) -> list[str]:
        return [node.label for node, _ in self.revealed]


class SettingsBox:
    """Mutable holder so a test can change settings between resolutions."""

    def __init__(self, settings: ExplorerSettings | None = None) -> None:
        self.value = settings or ExplorerSettings(reveal_delay=0.0)
        self.calls = 0

    def __call__(self) -> ExplorerSettings:
        self.calls += 1
        return self.value


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fixture_path() -> Path:
    return Path(__file__).parent / "fixtures" / "registry.json"


@pytest.fixture
def registry(fixture_path: Path) -> InMemoryRegistryClient:
    """Return an in-memory registry seeded from the JSON fixture."""
    return load_fixture(fixture_path)


@pytest.fixture
def connection() -> ConnectionInfo:
    return ConnectionInfo(name="test", url="http://registry.test")


@pytest.fixture
def settings_box() -> SettingsBox:
    return SettingsBox()


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest_asyncio.fixture
async def source(
    registry: InMemoryRegistryClient,
    connection: ConnectionInfo,
    settings_box: SettingsBox,
) -> AsyncIterator[RegistryTreeDataSource]:
    """Return a connected tree data source over the seeded registry."""
    data_source = RegistryTreeDataSource(registry, settings=settings_box)
    await data_source.connect(connection)
    yield data_source
    await data_source.dispose()
