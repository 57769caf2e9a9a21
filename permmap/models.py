# permmap - Protocol objects: permissions, entities, artifacts, audit entries
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

import pydantic
from pydantic import BaseModel, ConfigDict

# Separator between a resource name and a field name in an identifier
SEPARATOR = "."


# --- Permission (closed set, same for every entity) ---
class Permission(str, Enum):
    """Action subject to authorization. Members are in canonical order."""
    CREATE = "Create"
    DELETE = "Delete"
    LIST = "List"
    READ = "Read"
    UPDATE = "Update"

    def __str__(self) -> str:
        return self.value


# --- Entities (lookup keys) ---
class Resource(BaseModel):
    """Top-level entity kind, identified by its bare name."""
    model_config = ConfigDict(frozen=True)

    name: str

    @property
    def identifier(self) -> str:
        return self.name

    def field(self, name: str) -> "Field":
        return Field(resource=self.name, name=name)

    def __str__(self) -> str:
        return self.identifier


class Field(BaseModel):
    """Sub-entity scoped to exactly one resource."""
    model_config = ConfigDict(frozen=True)

    resource: str
    name: str

    @property
    def identifier(self) -> str:
        return f"{self.resource}{SEPARATOR}{self.name}"

    @property
    def owner(self) -> Resource:
        return Resource(name=self.resource)

    def __str__(self) -> str:
        return self.identifier


Entity = Union[Resource, Field]


# --- Schema input ---
class ResourceSpec(BaseModel):
    """One resource of the schema input and its ordered field names."""
    name: str
    fields: list[str] = pydantic.Field(default_factory=list)


class SchemaDocument(BaseModel):
    """Schema input file: resources plus the authored permission decisions."""
    resources: list[ResourceSpec]
    decisions: dict[str, dict[str, Any]] = pydantic.Field(default_factory=dict)


# --- Generated JSON artifact ---
class MappingArtifact(BaseModel):
    permissions: list[Permission]
    resources: list[ResourceSpec]
    mappings: dict[str, dict[str, Any]]
    digest: str


# --- Lookup outcome for audit ---
class PolicyDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    NOT_FOUND = "not_found"


class AuditLogEntry(BaseModel):
    entity: str
    permission: str
    policy_decision: PolicyDecision
    table_digest: str
    timestamp: datetime = pydantic.Field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] = pydantic.Field(default_factory=dict)
