# permmap - Static resource/field permission mapping
from .errors import (
    PermissionMapError,
    SchemaError,
    ValidationError,
    NotFoundError,
    ArtifactError,
)
from .models import (
    SEPARATOR,
    Permission,
    Resource,
    Field,
    Entity,
    ResourceSpec,
    SchemaDocument,
    MappingArtifact,
    PolicyDecision,
    AuditLogEntry,
)
from .resources import Taxonomy, parse_entity, load_schema_document
from .mapping import MappingTable, build_mapping_table, decisions_from_triples
from .policy import requires_permission, check_permission, is_permitted
from .audit import AuditLog
from .codegen import render_typescript, parse_typescript, render_json, load_json, write_artifacts

__all__ = [
    "PermissionMapError",
    "SchemaError",
    "ValidationError",
    "NotFoundError",
    "ArtifactError",
    "SEPARATOR",
    "Permission",
    "Resource",
    "Field",
    "Entity",
    "ResourceSpec",
    "SchemaDocument",
    "MappingArtifact",
    "PolicyDecision",
    "AuditLogEntry",
    "Taxonomy",
    "parse_entity",
    "load_schema_document",
    "MappingTable",
    "build_mapping_table",
    "decisions_from_triples",
    "requires_permission",
    "check_permission",
    "is_permitted",
    "AuditLog",
    "render_typescript",
    "parse_typescript",
    "render_json",
    "load_json",
    "write_artifacts",
]
