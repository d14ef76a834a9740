from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from registry_explorer.errors import NotConnectedError, NotFoundError
from registry_explorer.models import Artifact, Branch, ConnectionInfo, Group, Rule, RuleType, Version

LATEST_BRANCH = "latest"

# Search keys compared exactly (case-insensitive); everything else is a substring match.
_EXACT_KEYS = frozenset({"version", "artifactType", "state", "globalId", "contentId"})


class InMemoryRegistryClient:
    """Dict-backed registry implementing the ``RegistryClient`` protocol."""

    def __init__(self) -> None:
        self.groups: dict[str, Group] = {}
        self.artifacts: dict[tuple[str, str], Artifact] = {}
        self.branches: dict[tuple[str, str, str], Branch] = {}
        self.branch_versions: dict[tuple[str, str, str], list[str]] = {}
        self.versions: dict[tuple[str, str, str], Version] = {}
        self.group_rules: dict[str, dict[RuleType, Rule]] = {}
        self.artifact_rules: dict[tuple[str, str], dict[RuleType, Rule]] = {}
        self.connection: ConnectionInfo | None = None

    # -- seeding ---------------------------------------------------------

    def add_group(self, group: Group) -> None:
        self.groups[group.group_id] = group

    def add_artifact(self, artifact: Artifact) -> None:
        group_id = artifact.group_id or "default"
        if group_id not in self.groups:
            self.add_group(Group(group_id=group_id))
        self.artifacts[(group_id, artifact.artifact_id)] = artifact.model_copy(update={"group_id": group_id})

    def add_branch(self, branch: Branch) -> None:
        group_id = branch.group_id or "default"
        key = (group_id, branch.artifact_id, branch.branch_id)
        self.branches[key] = branch.model_copy(update={"group_id": group_id})
        self.branch_versions.setdefault(key, [])

    def add_version(self, version: Version, branches: Iterable[str] = (LATEST_BRANCH,)) -> None:
        group_id = version.group_id or "default"
        if (group_id, version.artifact_id) not in self.artifacts:
            self.add_artifact(Artifact(group_id=group_id, artifact_id=version.artifact_id))
        self.versions[(group_id, version.artifact_id, version.version)] = version.model_copy(
            update={"group_id": group_id}
        )
        for branch_id in branches:
            key = (group_id, version.artifact_id, branch_id)
            if key not in self.branches:
                self.add_branch(
                    Branch(
                        group_id=group_id,
                        artifact_id=version.artifact_id,
                        branch_id=branch_id,
                        system_defined=branch_id == LATEST_BRANCH,
                    )
                )
            self.branch_versions[key].append(version.version)

    def add_group_rule(self, group_id: str, rule: Rule) -> None:
        self.group_rules.setdefault(group_id, {})[rule.rule_type] = rule

    def add_artifact_rule(self, group_id: str, artifact_id: str, rule: Rule) -> None:
        self.artifact_rules.setdefault((group_id, artifact_id), {})[rule.rule_type] = rule

    # -- RegistryClient --------------------------------------------------

    async def open(self, connection: ConnectionInfo) -> None:
        self.connection = connection

    async def close(self) -> None:
        self.connection = None

    async def list_groups(self) -> list[Group]:
        self._ensure_connected()
        return [self._with_count(group) for group in self.groups.values()]

    async def list_artifacts(self, group_id: str) -> list[Artifact]:
        self._ensure_connected()
        if group_id not in self.groups:
            raise NotFoundError("group", group_id)
        return [a for (g, _), a in self.artifacts.items() if g == group_id]

    async def list_branches(self, group_id: str, artifact_id: str) -> list[Branch]:
        self._ensure_connected()
        if (group_id, artifact_id) not in self.artifacts:
            raise NotFoundError("artifact", f"{group_id}/{artifact_id}")
        return [b for (g, a, _), b in self.branches.items() if (g, a) == (group_id, artifact_id)]

    async def list_branch_versions(self, group_id: str, artifact_id: str, branch_id: str) -> list[Version]:
        self._ensure_connected()
        key = (group_id, artifact_id, branch_id)
        if key not in self.branches:
            raise NotFoundError("branch", f"{group_id}/{artifact_id}/{branch_id}")
        return [self.versions[(group_id, artifact_id, v)] for v in self.branch_versions[key]]

    async def search_artifacts(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Artifact]:
        self._ensure_connected()
        hits = [a for a in self.artifacts.values() if _matches(a, criteria)]
        return hits[:limit] if limit else hits

    async def search_versions(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Version]:
        self._ensure_connected()
        hits = [v for v in self.versions.values() if _matches(v, criteria)]
        return hits[:limit] if limit else hits

    async def search_groups(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Group]:
        self._ensure_connected()
        hits = [self._with_count(g) for g in self.groups.values() if _matches(g, criteria)]
        return hits[:limit] if limit else hits

    async def list_group_rules(self, group_id: str) -> list[RuleType]:
        self._ensure_connected()
        return list(self.group_rules.get(group_id, {}))

    async def get_group_rule(self, group_id: str, rule_type: RuleType) -> Rule:
        self._ensure_connected()
        try:
            return self.group_rules[group_id][rule_type]
        except KeyError:
            raise NotFoundError("rule", f"{group_id}:{rule_type.value}") from None

    async def list_artifact_rules(self, group_id: str, artifact_id: str) -> list[RuleType]:
        self._ensure_connected()
        return list(self.artifact_rules.get((group_id, artifact_id), {}))

    async def get_artifact_rule(self, group_id: str, artifact_id: str, rule_type: RuleType) -> Rule:
        self._ensure_connected()
        try:
            return self.artifact_rules[(group_id, artifact_id)][rule_type]
        except KeyError:
            raise NotFoundError("rule", f"{group_id}/{artifact_id}:{rule_type.value}") from None

    def _ensure_connected(self) -> None:
        if self.connection is None:
            raise NotConnectedError()

    def _with_count(self, group: Group) -> Group:
        if group.artifact_count is not None:
            return group
        count = sum(1 for g, _ in self.artifacts if g == group.group_id)
        return group.model_copy(update={"artifact_count": count})


def _matches(entity: BaseModel, criteria: Mapping[str, str]) -> bool:
    data = entity.model_dump(by_alias=True)
    for key, expected in criteria.items():
        if not expected:
            continue
        if key == "labels":
            if not _labels_match(data.get("labels") or {}, expected):
                return False
            continue
        actual = data.get(key)
        if actual is None:
            return False
        if key in _EXACT_KEYS:
            if str(actual).casefold() != expected.casefold():
                return False
        elif expected.casefold() not in str(actual).casefold():
            return False
    return True


def _labels_match(labels: Mapping[str, str], expected: str) -> bool:
    key, sep, value = expected.partition(":")
    if key not in labels:
        return False
    return not sep or labels[key] == value


# ---------------------------------------------------------------------------
# JSON fixtures
# ---------------------------------------------------------------------------


class FixtureVersion(Version):
    branches: list[str] = Field(default_factory=lambda: [LATEST_BRANCH])


class FixtureArtifactRule(Rule):
    group_id: str
    artifact_id: str


class RegistryFixture(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    groups: list[Group] = Field(default_factory=list)
    artifacts: list[Artifact] = Field(default_factory=list)
    branches: list[Branch] = Field(default_factory=list)
    versions: list[FixtureVersion] = Field(default_factory=list)
    group_rules: dict[str, list[Rule]] = Field(default_factory=dict)
    artifact_rules: list[FixtureArtifactRule] = Field(default_factory=list)


def registry_from_fixture(data: Mapping[str, Any]) -> InMemoryRegistryClient:
    fixture = RegistryFixture.model_validate(data)
    client = InMemoryRegistryClient()
    for group in fixture.groups:
        client.add_group(group)
    for artifact in fixture.artifacts:
        client.add_artifact(artifact)
    for branch in fixture.branches:
        client.add_branch(branch)
    for version in fixture.versions:
        client.add_version(Version.model_validate(version.model_dump(exclude={"branches"})), version.branches)
    for group_id, rules in fixture.group_rules.items():
        for rule in rules:
            client.add_group_rule(group_id, rule)
    for rule in fixture.artifact_rules:
        client.add_artifact_rule(rule.group_id, rule.artifact_id, Rule(rule_type=rule.rule_type, config=rule.config))
    return client


def load_fixture(path: str | Path) -> InMemoryRegistryClient:
    return registry_from_fixture(json.loads(Path(path).read_text(encoding="utf-8")))
