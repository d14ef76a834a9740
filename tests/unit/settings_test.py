"""Unit tests for environment-driven explorer settings."""

import logging

import pytest
from pydantic import ValidationError

from registry_explorer.core.settings import (
    ArtifactSort,
    BranchSort,
    ExplorerSettings,
    GroupSort,
    load_settings,
)

_VARS = (
    "GROUP_SORT",
    "ARTIFACT_SORT",
    "BRANCH_SORT",
    "HIDE_EMPTY_GROUPS",
    "HIDE_DISABLED_ARTIFACTS",
    "ARTIFACT_TYPES",
    "HIDE_DISABLED_VERSIONS",
    "HIDE_DEPRECATED_VERSIONS",
    "REVERSE_VERSION_ORDER",
    "TRUNCATE_DESCRIPTIONS",
    "TRUNCATE_LENGTH",
    "SEARCH_LIMIT",
    "REVEAL_DELAY",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(f"REGISTRY_EXPLORER_{name}", raising=False)


class TestLoadSettings:
    def test_defaults(self) -> None:
        settings = load_settings()
        assert settings == ExplorerSettings()
        assert settings.group_sort is GroupSort.ALPHABETICAL
        assert settings.branch_sort is BranchSort.SYSTEM_FIRST
        assert settings.truncate_length == 50
        assert settings.search_limit == 50
        assert settings.reveal_delay == 0.5

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REGISTRY_EXPLORER_GROUP_SORT", "artifact-count")
        monkeypatch.setenv("REGISTRY_EXPLORER_ARTIFACT_SORT", "type")
        monkeypatch.setenv("REGISTRY_EXPLORER_HIDE_EMPTY_GROUPS", "yes")
        monkeypatch.setenv("REGISTRY_EXPLORER_ARTIFACT_TYPES", "avro, openapi,,")
        monkeypatch.setenv("REGISTRY_EXPLORER_TRUNCATE_LENGTH", "20")
        monkeypatch.setenv("REGISTRY_EXPLORER_REVEAL_DELAY", "0")

        settings = load_settings()

        assert settings.group_sort is GroupSort.ARTIFACT_COUNT
        assert settings.artifact_sort is ArtifactSort.TYPE
        assert settings.hide_empty_groups is True
        assert settings.artifact_types == ("AVRO", "OPENAPI")
        assert settings.truncate_length == 20
        assert settings.reveal_delay == 0.0

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "on", "yes"])
    def test_truthy_values(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("REGISTRY_EXPLORER_REVERSE_VERSION_ORDER", value)
        assert load_settings().reverse_version_order is True

    def test_falsy_value_disables_default_on_option(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REGISTRY_EXPLORER_TRUNCATE_DESCRIPTIONS", "false")
        assert load_settings().truncate_descriptions is False

    def test_blank_value_keeps_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REGISTRY_EXPLORER_SEARCH_LIMIT", "   ")
        assert load_settings().search_limit == 50

    def test_each_call_reads_fresh_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert load_settings().hide_disabled_versions is False
        monkeypatch.setenv("REGISTRY_EXPLORER_HIDE_DISABLED_VERSIONS", "1")
        assert load_settings().hide_disabled_versions is True

    def test_invalid_values_fall_back_to_defaults(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("REGISTRY_EXPLORER_GROUP_SORT", "newest")
        monkeypatch.setenv("REGISTRY_EXPLORER_TRUNCATE_LENGTH", "fifty")
        monkeypatch.setenv("REGISTRY_EXPLORER_REVEAL_DELAY", "soon")
        monkeypatch.setenv("REGISTRY_EXPLORER_SEARCH_LIMIT", "10")

        with caplog.at_level(logging.WARNING, logger="registry_explorer.core.settings"):
            settings = load_settings()

        assert settings.group_sort is GroupSort.ALPHABETICAL
        assert settings.truncate_length == 50
        assert settings.reveal_delay == 0.5
        assert settings.search_limit == 10
        assert "REGISTRY_EXPLORER_GROUP_SORT" in caplog.text
        assert "REGISTRY_EXPLORER_TRUNCATE_LENGTH" in caplog.text


class TestExplorerSettings:
    def test_is_frozen(self) -> None:
        settings = ExplorerSettings()
        with pytest.raises(ValidationError):
            settings.search_limit = 10  # type: ignore[misc]

    def test_model_copy_overrides(self) -> None:
        settings = ExplorerSettings().model_copy(update={"reveal_delay": 0.0})
        assert settings.reveal_delay == 0.0
