# permmap - Resource/field taxonomy (closed universe of entities and permissions)
import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

import pydantic

from .errors import NotFoundError, SchemaError
from .models import SEPARATOR, Entity, Field, Permission, Resource, ResourceSpec, SchemaDocument

log = logging.getLogger(__name__)

# Names are rendered as enum members in the TypeScript artifact
NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Top-level names the TypeScript artifact declares or relies on
RESERVED_NAMES = frozenset(
    {
        "Permissions",
        "Resources",
        "AllResources",
        "PermissionResources",
        "PermissionMappings",
        "Mappings",
        "requiresPermission",
        "Record",
        "boolean",
    }
)

# TypeScript words that cannot name an enum declaration
TYPESCRIPT_KEYWORDS = frozenset(
    {
        "any", "as", "await", "break", "case", "catch", "class", "const", "continue",
        "debugger", "declare", "default", "delete", "do", "else", "enum", "export",
        "extends", "false", "finally", "for", "function", "if", "implements", "import",
        "in", "instanceof", "interface", "let", "new", "never", "null", "number",
        "object", "package", "private", "protected", "public", "return", "static",
        "string", "super", "switch", "symbol", "this", "throw", "true", "try", "type",
        "typeof", "undefined", "unknown", "var", "void", "while", "with", "yield",
    }
)


def _name_problems(kind: str, name: str) -> list[str]:
    if not name:
        return [f"{kind} name must not be empty"]
    if SEPARATOR in name:
        return [f"{kind} name {name!r} must not contain {SEPARATOR!r}"]
    if not NAME_PATTERN.match(name):
        return [f"{kind} name {name!r} is not a valid identifier"]
    return []


def parse_entity(identifier: str) -> Entity:
    """Split an identifier back into a Resource or a Field."""
    parts = identifier.split(SEPARATOR)
    if len(parts) > 2:
        raise SchemaError([f"identifier {identifier!r} contains more than one {SEPARATOR!r}"])
    if any(not part for part in parts):
        raise SchemaError([f"identifier {identifier!r} has an empty part"])
    if len(parts) == 2:
        return Field(resource=parts[0], name=parts[1])
    return Resource(name=parts[0])


class Taxonomy:
    """Ordered, validated universe of resources, fields and permissions.

    ``resources`` is a sequence of ``(resource_name, field_names)`` pairs or
    ``ResourceSpec`` models, in schema order. Every naming problem is collected
    and raised together as a ``SchemaError``.
    """

    def __init__(self, resources: Iterable[ResourceSpec | tuple[str, Sequence[str]]]):
        specs = [
            spec if isinstance(spec, ResourceSpec) else ResourceSpec(name=spec[0], fields=list(spec[1]))
            for spec in resources
        ]
        problems: list[str] = []
        seen_resources: set[str] = set()
        for spec in specs:
            problems.extend(_name_problems("resource", spec.name))
            if spec.name in RESERVED_NAMES:
                problems.append(f"resource name {spec.name!r} is reserved")
            elif spec.name in TYPESCRIPT_KEYWORDS:
                problems.append(f"resource name {spec.name!r} is a TypeScript keyword")
            if spec.name in seen_resources:
                problems.append(f"duplicate resource {spec.name!r}")
            seen_resources.add(spec.name)
            seen_fields: set[str] = set()
            for field_name in spec.fields:
                problems.extend(_name_problems(f"field of {spec.name!r}", field_name))
                if field_name in seen_fields:
                    problems.append(f"duplicate field {spec.name}{SEPARATOR}{field_name}")
                seen_fields.add(field_name)
        if problems:
            raise SchemaError(problems)

        self._permissions: tuple[Permission, ...] = tuple(Permission)
        self._resources: tuple[Resource, ...] = tuple(Resource(name=spec.name) for spec in specs)
        self._fields: dict[str, tuple[Field, ...]] = {
            spec.name: tuple(Field(resource=spec.name, name=f) for f in spec.fields) for spec in specs
        }
        entities: list[Entity] = []
        for resource in self._resources:
            entities.append(resource)
            entities.extend(self._fields[resource.name])
        self._entities: tuple[Entity, ...] = tuple(entities)
        self._by_identifier: dict[str, Entity] = {e.identifier: e for e in self._entities}
        # One identifier per entity
        if len(self._by_identifier) != len(self._entities):
            raise SchemaError(["entity identifiers are not unique"])

    @classmethod
    def from_document(cls, document: SchemaDocument) -> "Taxonomy":
        return cls(document.resources)

    def list_permissions(self) -> tuple[Permission, ...]:
        return self._permissions

    def list_entities(self) -> tuple[Entity, ...]:
        return self._entities

    def resources(self) -> tuple[Resource, ...]:
        return self._resources

    def fields(self, resource: Resource | str) -> tuple[Field, ...]:
        name = resource.name if isinstance(resource, Resource) else resource
        try:
            return self._fields[name]
        except KeyError:
            raise NotFoundError(name) from None

    def get(self, identifier: str) -> Entity:
        try:
            return self._by_identifier[identifier]
        except KeyError:
            raise NotFoundError(identifier) from None

    def __contains__(self, entity: object) -> bool:
        if isinstance(entity, str):
            return entity in self._by_identifier
        if isinstance(entity, (Resource, Field)):
            return self._by_identifier.get(entity.identifier) == entity
        return False

    def specs(self) -> list[ResourceSpec]:
        return [
            ResourceSpec(name=r.name, fields=[f.name for f in self._fields[r.name]])
            for r in self._resources
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Taxonomy):
            return NotImplemented
        return self._entities == other._entities and self._permissions == other._permissions

    def __hash__(self) -> int:
        return hash((self._entities, self._permissions))

    def __repr__(self) -> str:
        return f"<Taxonomy(resources={len(self._resources)}, entities={len(self._entities)})>"


def load_schema_document(path: Path) -> SchemaDocument:
    """Read the schema input file (resources and authored decisions)."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaError([f"cannot read schema {path}: {e}"]) from e
    try:
        document = SchemaDocument.model_validate_json(text)
    except pydantic.ValidationError as e:
        raise SchemaError([f"malformed schema {path}: {err['msg']} at {err['loc']}" for err in e.errors()]) from e
    log.info("Loaded schema %s (%d resources)", path, len(document.resources))
    return document
