"""Shared option handling for commands that talk to a registry."""

from __future__ import annotations

from pathlib import Path

import typer

from registry_explorer.core.ports.registry import RegistryClient
from registry_explorer.models import ConnectionInfo
from registry_explorer.registry import HttpRegistryClient, load_fixture


def build_client(url: str | None, fixture: Path | None) -> RegistryClient:
    if fixture is not None:
        return load_fixture(fixture)
    if url is not None:
        return HttpRegistryClient()
    raise typer.BadParameter("Either --url or --fixture must be provided.")


def build_connection(
    url: str | None,
    fixture: Path | None,
    username: str | None = None,
    password: str | None = None,
    token: str | None = None,
) -> ConnectionInfo:
    if fixture is not None:
        return ConnectionInfo(name=fixture.stem, url=fixture.resolve().as_uri())
    assert url is not None
    if token:
        return ConnectionInfo(name=url, url=url, auth_type="oidc", token=token)
    if username and password:
        return ConnectionInfo(name=url, url=url, auth_type="basic", username=username, password=password)
    return ConnectionInfo(name=url, url=url)


def parse_criteria(values: list[str]) -> dict[str, str]:
    """Turn repeated ``key=value`` options into an insertion-ordered dict."""
    criteria: dict[str, str] = {}
    for value in values:
        key, sep, expected = value.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {value!r}", param_hint="--criteria")
        criteria[key.strip()] = expected.strip()
    return criteria
