from registry_explorer.registry.http import HttpRegistryClient
from registry_explorer.registry.memory import (
    LATEST_BRANCH,
    InMemoryRegistryClient,
    RegistryFixture,
    load_fixture,
    registry_from_fixture,
)

__all__ = [
    "LATEST_BRANCH",
    "HttpRegistryClient",
    "InMemoryRegistryClient",
    "RegistryFixture",
    "load_fixture",
    "registry_from_fixture",
]
