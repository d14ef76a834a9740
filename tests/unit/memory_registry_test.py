"""Unit tests for the in-memory registry client and JSON fixtures."""

import json
from pathlib import Path

import pytest
import pytest_asyncio

from registry_explorer.errors import NotConnectedError, NotFoundError
from registry_explorer.models import Artifact, ConnectionInfo, Group, Rule, RuleType, Version
from registry_explorer.registry import LATEST_BRANCH, InMemoryRegistryClient, load_fixture, registry_from_fixture


@pytest_asyncio.fixture
async def connected(registry: InMemoryRegistryClient, connection: ConnectionInfo) -> InMemoryRegistryClient:
    await registry.open(connection)
    return registry


class TestSeeding:
    def test_add_version_creates_artifact_and_latest_branch(self) -> None:
        client = InMemoryRegistryClient()
        client.add_version(Version(group_id="g", artifact_id="a", version="1"))
        assert ("g", "a") in client.artifacts
        assert "g" in client.groups
        latest = client.branches[("g", "a", LATEST_BRANCH)]
        assert latest.system_defined
        assert client.branch_versions[("g", "a", LATEST_BRANCH)] == ["1"]

    def test_artifact_without_group_goes_to_default(self) -> None:
        client = InMemoryRegistryClient()
        client.add_artifact(Artifact(artifact_id="orphan"))
        assert client.artifacts[("default", "orphan")].group_id == "default"

    def test_fixture_version_branches(self, registry: InMemoryRegistryClient) -> None:
        assert registry.branch_versions[("group1", "artifact1", "latest")] == ["1.0.0", "2.0.0"]
        assert registry.branch_versions[("group1", "artifact1", "stable")] == ["1.0.0"]
        assert not registry.branches[("group1", "artifact1", "stable")].system_defined

    def test_fixture_from_dict(self) -> None:
        client = registry_from_fixture(
            {
                "groups": [{"groupId": "g"}],
                "versions": [{"groupId": "g", "artifactId": "a", "version": "1"}],
                "groupRules": {"g": [{"ruleType": "INTEGRITY", "config": "FULL"}]},
            }
        )
        assert client.group_rules["g"][RuleType.INTEGRITY].config == "FULL"
        assert ("g", "a", "1") in client.versions

    def test_load_fixture_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({"artifacts": [{"groupId": "g", "artifactId": "a"}]}), encoding="utf-8")
        assert list(load_fixture(path).artifacts) == [("g", "a")]


class TestConnection:
    @pytest.mark.asyncio
    async def test_calls_fail_before_open(self, registry: InMemoryRegistryClient) -> None:
        with pytest.raises(NotConnectedError):
            await registry.list_groups()

    @pytest.mark.asyncio
    async def test_calls_fail_after_close(self, connected: InMemoryRegistryClient) -> None:
        await connected.close()
        with pytest.raises(NotConnectedError):
            await connected.search_artifacts({})


class TestListing:
    @pytest.mark.asyncio
    async def test_groups_get_artifact_counts(self, connected: InMemoryRegistryClient) -> None:
        counts = {g.group_id: g.artifact_count for g in await connected.list_groups()}
        assert counts == {"com.example": 3, "group1": 2, "empty-group": 0}

    @pytest.mark.asyncio
    async def test_explicit_count_is_kept(self, connected: InMemoryRegistryClient) -> None:
        connected.add_group(Group(group_id="remote", artifact_count=7))
        counts = {g.group_id: g.artifact_count for g in await connected.list_groups()}
        assert counts["remote"] == 7

    @pytest.mark.asyncio
    async def test_unknown_coordinates_raise_not_found(self, connected: InMemoryRegistryClient) -> None:
        with pytest.raises(NotFoundError):
            await connected.list_artifacts("missing")
        with pytest.raises(NotFoundError):
            await connected.list_branches("group1", "missing")
        with pytest.raises(NotFoundError):
            await connected.list_branch_versions("group1", "artifact1", "missing")

    @pytest.mark.asyncio
    async def test_branch_versions(self, connected: InMemoryRegistryClient) -> None:
        versions = await connected.list_branch_versions("group1", "artifact1", "stable")
        assert [v.version for v in versions] == ["1.0.0"]
        assert versions[0].global_id == 4

    @pytest.mark.asyncio
    async def test_rules(self, connected: InMemoryRegistryClient) -> None:
        assert await connected.list_group_rules("com.example") == [RuleType.VALIDITY]
        assert await connected.list_group_rules("group1") == []
        rule = await connected.get_artifact_rule("com.example", "user-api", RuleType.COMPATIBILITY)
        assert rule == Rule(rule_type=RuleType.COMPATIBILITY, config="BACKWARD")
        with pytest.raises(NotFoundError):
            await connected.get_group_rule("group1", RuleType.VALIDITY)


class TestSearch:
    @pytest.mark.asyncio
    async def test_substring_match_is_case_insensitive(self, connected: InMemoryRegistryClient) -> None:
        hits = await connected.search_artifacts({"name": "USER"})
        assert [a.artifact_id for a in hits] == ["user-api"]

    @pytest.mark.asyncio
    async def test_exact_keys_do_not_match_substrings(self, connected: InMemoryRegistryClient) -> None:
        hits = await connected.search_versions({"version": "1"})
        assert [(v.artifact_id, v.version) for v in hits] == [("order-events", "1")]

    @pytest.mark.asyncio
    async def test_criteria_are_combined(self, connected: InMemoryRegistryClient) -> None:
        hits = await connected.search_versions({"groupId": "group1", "state": "deprecated"})
        assert [(v.artifact_id, v.version) for v in hits] == [("artifact1", "2.0.0")]

    @pytest.mark.asyncio
    async def test_empty_criterion_is_ignored(self, connected: InMemoryRegistryClient) -> None:
        assert len(await connected.search_groups({"groupId": ""})) == 3

    @pytest.mark.asyncio
    async def test_labels_match_key_or_pair(self, connected: InMemoryRegistryClient) -> None:
        connected.add_artifact(Artifact(group_id="g", artifact_id="tagged", labels={"team": "core"}))
        assert [a.artifact_id for a in await connected.search_artifacts({"labels": "team"})] == ["tagged"]
        assert [a.artifact_id for a in await connected.search_artifacts({"labels": "team:core"})] == ["tagged"]
        assert await connected.search_artifacts({"labels": "team:edge"}) == []

    @pytest.mark.asyncio
    async def test_unknown_key_matches_nothing(self, connected: InMemoryRegistryClient) -> None:
        assert await connected.search_artifacts({"colour": "blue"}) == []

    @pytest.mark.asyncio
    async def test_limit(self, connected: InMemoryRegistryClient) -> None:
        assert len(await connected.search_versions({}, limit=2)) == 2
