"""Apicurio Registry v3 REST client built on httpx."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from registry_explorer.errors import AuthenticationError, NetworkError, NotConnectedError, NotFoundError
from registry_explorer.models import Artifact, Branch, ConnectionInfo, Group, Rule, RuleType, Version

logger = logging.getLogger(__name__)

API_PATH = "/apis/registry/v3"
_TIMEOUT = 30.0
_DEFAULT_SEARCH_LIMIT = 100


def _seg(value: str) -> str:
    return quote(value, safe="")


class HttpRegistryClient:
    """Implements the ``RegistryClient`` protocol over HTTP.

    ``transport`` is passed through to ``httpx.AsyncClient``; tests use it
    to plug in an ``httpx.MockTransport``.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self, connection: ConnectionInfo) -> None:
        await self.close()
        headers = {"Accept": "application/json"}
        auth: httpx.Auth | None = None
        if connection.auth_type == "basic" and connection.username and connection.password:
            auth = httpx.BasicAuth(connection.username, connection.password)
        elif connection.auth_type == "oidc" and connection.token:
            headers["Authorization"] = f"Bearer {connection.token}"
        self._client = httpx.AsyncClient(
            base_url=connection.url.rstrip("/") + API_PATH,
            headers=headers,
            auth=auth,
            timeout=_TIMEOUT,
            transport=self._transport,
        )
        logger.debug("Opened HTTP client for %s", connection.url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def list_groups(self) -> list[Group]:
        data = await self._get("/groups", "group", "*", params={"limit": 1000, "offset": 0})
        return [Group.model_validate(g) for g in data.get("groups") or []]

    async def list_artifacts(self, group_id: str) -> list[Artifact]:
        data = await self._get(
            f"/groups/{_seg(group_id)}/artifacts", "group", group_id, params={"limit": 100, "offset": 0}
        )
        return [Artifact.model_validate({"groupId": group_id, **a}) for a in data.get("artifacts") or []]

    async def list_branches(self, group_id: str, artifact_id: str) -> list[Branch]:
        data = await self._get(
            f"/groups/{_seg(group_id)}/artifacts/{_seg(artifact_id)}/branches",
            "artifact",
            f"{group_id}/{artifact_id}",
        )
        return [
            Branch.model_validate({"groupId": group_id, "artifactId": artifact_id, **b})
            for b in data.get("branches") or []
        ]

    async def list_branch_versions(self, group_id: str, artifact_id: str, branch_id: str) -> list[Version]:
        data = await self._get(
            f"/groups/{_seg(group_id)}/artifacts/{_seg(artifact_id)}/branches/{_seg(branch_id)}/versions",
            "branch",
            f"{group_id}/{artifact_id}/{branch_id}",
        )
        return [
            Version.model_validate({"groupId": group_id, "artifactId": artifact_id, **v})
            for v in data.get("versions") or []
        ]

    async def search_artifacts(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Artifact]:
        data = await self._get("/search/artifacts", "search", "artifacts", params=_search_params(criteria, limit))
        return [Artifact.model_validate(a) for a in data.get("artifacts") or []]

    async def search_versions(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Version]:
        data = await self._get("/search/versions", "search", "versions", params=_search_params(criteria, limit))
        return [Version.model_validate(v) for v in data.get("versions") or []]

    async def search_groups(self, criteria: Mapping[str, str], limit: int | None = None) -> list[Group]:
        data = await self._get("/search/groups", "search", "groups", params=_search_params(criteria, limit))
        return [Group.model_validate(g) for g in data.get("groups") or []]

    async def list_group_rules(self, group_id: str) -> list[RuleType]:
        data = await self._get(f"/groups/{_seg(group_id)}/rules", "group", group_id)
        return [RuleType(r) for r in data or []]

    async def get_group_rule(self, group_id: str, rule_type: RuleType) -> Rule:
        data = await self._get(f"/groups/{_seg(group_id)}/rules/{rule_type.value}", "rule", rule_type.value)
        return Rule.model_validate(data)

    async def list_artifact_rules(self, group_id: str, artifact_id: str) -> list[RuleType]:
        data = await self._get(
            f"/groups/{_seg(group_id)}/artifacts/{_seg(artifact_id)}/rules", "artifact", f"{group_id}/{artifact_id}"
        )
        return [RuleType(r) for r in data or []]

    async def get_artifact_rule(self, group_id: str, artifact_id: str, rule_type: RuleType) -> Rule:
        data = await self._get(
            f"/groups/{_seg(group_id)}/artifacts/{_seg(artifact_id)}/rules/{rule_type.value}",
            "rule",
            rule_type.value,
        )
        return Rule.model_validate(data)

    async def _get(
        self,
        path: str,
        resource_type: str,
        resource_id: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        if self._client is None:
            raise NotConnectedError()
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 404:
                raise NotFoundError(resource_type, resource_id) from exc
            if status in (401, 403):
                raise AuthenticationError(f"GET {path} returned {status}") from exc
            raise NetworkError(f"GET {path} returned {status}", status) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"GET {path} failed: {exc}") from exc
        return response.json()


def _search_params(criteria: Mapping[str, str], limit: int | None) -> dict[str, Any]:
    params: dict[str, Any] = {"limit": limit or _DEFAULT_SEARCH_LIMIT, "offset": 0}
    params.update({key: value for key, value in criteria.items() if value})
    return params
