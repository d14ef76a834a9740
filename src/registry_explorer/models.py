"""Registry DTOs and the explorer's tree node model.

Remote DTOs mirror the Apicurio Registry v3 JSON shape (camelCase on the
wire, snake_case in Python). ``Node`` is the only thing handed to a host
widget; it is a frozen value whose equality is its identity tuple, so a
node rebuilt from coordinates is interchangeable with one built from a
remote listing.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RemoteModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class RuleType(str, Enum):
    VALIDITY = "VALIDITY"
    COMPATIBILITY = "COMPATIBILITY"
    INTEGRITY = "INTEGRITY"


class Group(_RemoteModel):
    group_id: str
    description: str | None = None
    artifact_count: int | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    owner: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None


class Artifact(_RemoteModel):
    group_id: str | None = None
    artifact_id: str
    artifact_type: str | None = None
    name: str | None = None
    description: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    state: str | None = None
    owner: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None


class Branch(_RemoteModel):
    group_id: str | None = None
    artifact_id: str
    branch_id: str
    description: str | None = None
    system_defined: bool = False
    owner: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None


class Version(_RemoteModel):
    group_id: str | None = None
    artifact_id: str
    version: str
    version_id: int | None = None
    global_id: int | None = None
    content_id: int | None = None
    artifact_type: str | None = None
    state: str | None = None
    name: str | None = None
    description: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    created_on: datetime | None = None
    modified_on: datetime | None = None


class Rule(_RemoteModel):
    rule_type: RuleType
    config: str


class ConnectionInfo(BaseModel):
    name: str = "default"
    url: str
    auth_type: Literal["none", "basic", "oidc"] = "none"
    username: str | None = None
    password: str | None = None
    token: str | None = None


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


class NodeKind(str, Enum):
    GROUP = "group"
    ARTIFACT = "artifact"
    BRANCH = "branch"
    VERSION = "version"
    PLACEHOLDER = "placeholder"


class RuleSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_type: RuleType
    config: str


class GroupMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[NodeKind.GROUP] = NodeKind.GROUP
    artifact_count: int | None = None
    match_count: int | None = None
    description: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    rules: tuple[RuleSummary, ...] = ()


class ArtifactMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[NodeKind.ARTIFACT] = NodeKind.ARTIFACT
    artifact_type: str | None = None
    name: str | None = None
    state: str | None = None
    description: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    rules: tuple[RuleSummary, ...] = ()


class BranchMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[NodeKind.BRANCH] = NodeKind.BRANCH
    system_defined: bool = False
    description: str | None = None
    owner: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None


class VersionMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[NodeKind.VERSION] = NodeKind.VERSION
    version_id: int | None = None
    global_id: int | None = None
    content_id: int | None = None
    state: str | None = None
    name: str | None = None
    description: str | None = None
    created_on: datetime | None = None
    modified_on: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    artifact_type: str | None = None


class PlaceholderMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal[NodeKind.PLACEHOLDER] = NodeKind.PLACEHOLDER
    description: str | None = None
    error: str | None = None


NodeMetadata = Annotated[
    GroupMetadata | ArtifactMetadata | BranchMetadata | VersionMetadata | PlaceholderMetadata,
    Field(discriminator="kind"),
]

_EMPTY_METADATA: dict[NodeKind, type[BaseModel]] = {
    NodeKind.GROUP: GroupMetadata,
    NodeKind.ARTIFACT: ArtifactMetadata,
    NodeKind.BRANCH: BranchMetadata,
    NodeKind.VERSION: VersionMetadata,
    NodeKind.PLACEHOLDER: PlaceholderMetadata,
}

NodeIdentity = tuple[NodeKind, str | None, str | None, str | None, str | None]


class Node(BaseModel):
    """A single tree position.

    ``parent_id`` is the immediate owner (group for an artifact, artifact for
    a branch, branch for a version). ``artifact_id`` is only set on versions,
    whose branch id alone does not locate them.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    kind: NodeKind
    id: str | None = None
    metadata: NodeMetadata
    parent_id: str | None = None
    group_id: str | None = None
    artifact_id: str | None = None

    def __init__(
        self,
        label: str,
        kind: NodeKind,
        id: str | None = None,
        metadata: Any = None,
        parent_id: str | None = None,
        group_id: str | None = None,
        artifact_id: str | None = None,
    ) -> None:
        if metadata is None:
            metadata = _EMPTY_METADATA[kind]()
        super().__init__(
            label=label,
            kind=kind,
            id=id,
            metadata=metadata,
            parent_id=parent_id,
            group_id=group_id,
            artifact_id=artifact_id,
        )

    @property
    def identity(self) -> NodeIdentity:
        return (self.kind, self.group_id, self.parent_id, self.id, self.artifact_id)

    @property
    def is_leaf(self) -> bool:
        return self.kind in (NodeKind.VERSION, NodeKind.PLACEHOLDER)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


# ---------------------------------------------------------------------------
# Node factories
# ---------------------------------------------------------------------------


def group_node(group_id: str, metadata: GroupMetadata | None = None) -> Node:
    return Node(group_id, NodeKind.GROUP, group_id, metadata)


def artifact_node(group_id: str, artifact_id: str, metadata: ArtifactMetadata | None = None) -> Node:
    return Node(artifact_id, NodeKind.ARTIFACT, artifact_id, metadata, parent_id=group_id, group_id=group_id)


def branch_node(group_id: str, artifact_id: str, branch_id: str, metadata: BranchMetadata | None = None) -> Node:
    return Node(branch_id, NodeKind.BRANCH, branch_id, metadata, parent_id=artifact_id, group_id=group_id)


def version_node(
    group_id: str,
    artifact_id: str,
    branch_id: str,
    version: str,
    metadata: VersionMetadata | None = None,
) -> Node:
    return Node(
        version,
        NodeKind.VERSION,
        version,
        metadata,
        parent_id=branch_id,
        group_id=group_id,
        artifact_id=artifact_id,
    )


def placeholder(label: str, description: str | None = None, error: str | None = None) -> Node:
    return Node(label, NodeKind.PLACEHOLDER, None, PlaceholderMetadata(description=description, error=error))


def group_metadata(group: Group, rules: tuple[RuleSummary, ...] = ()) -> GroupMetadata:
    return GroupMetadata(
        artifact_count=group.artifact_count,
        description=group.description,
        created_on=group.created_on,
        modified_on=group.modified_on,
        labels=group.labels,
        rules=rules,
    )


def artifact_metadata(artifact: Artifact, rules: tuple[RuleSummary, ...] = ()) -> ArtifactMetadata:
    return ArtifactMetadata(
        artifact_type=artifact.artifact_type,
        name=artifact.name,
        state=artifact.state,
        description=artifact.description,
        created_on=artifact.created_on,
        modified_on=artifact.modified_on,
        labels=artifact.labels,
        rules=rules,
    )


def branch_metadata(branch: Branch) -> BranchMetadata:
    return BranchMetadata(
        system_defined=branch.system_defined,
        description=branch.description,
        owner=branch.owner,
        created_on=branch.created_on,
        modified_on=branch.modified_on,
    )


def version_metadata(version: Version) -> VersionMetadata:
    return VersionMetadata(
        version_id=version.version_id,
        global_id=version.global_id,
        content_id=version.content_id,
        state=version.state,
        name=version.name,
        description=version.description,
        created_on=version.created_on,
        modified_on=version.modified_on,
        labels=version.labels,
        artifact_type=version.artifact_type,
    )
