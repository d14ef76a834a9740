from collections.abc import Mapping
from typing import Protocol

from registry_explorer.models import Artifact, Branch, ConnectionInfo, Group, Rule, RuleType, Version


class RegistryClient(Protocol):
    async def open(self, connection: ConnectionInfo) -> None: ...

    async def close(self) -> None: ...

    async def list_groups(self) -> list[Group]: ...

    async def list_artifacts(self, group_id: str) -> list[Artifact]: ...

    async def list_branches(self, group_id: str, artifact_id: str) -> list[Branch]: ...

    async def list_branch_versions(self, group_id: str, artifact_id: str, branch_id: str) -> list[Version]: ...

    async def search_artifacts(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Artifact]: ...

    async def search_versions(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Version]: ...

    async def search_groups(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Group]: ...

    async def list_group_rules(self, group_id: str) -> list[RuleType]: ...

    async def get_group_rule(self, group_id: str, rule_type: RuleType) -> Rule: ...

    async def list_artifact_rules(self, group_id: str, artifact_id: str) -> list[RuleType]: ...

    async def get_artifact_rule(self, group_id: str, artifact_id: str, rule_type: RuleType) -> Rule: ...
