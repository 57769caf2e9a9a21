# permmap - Mapping table construction and validation
import hashlib
import json
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from .errors import NotFoundError, ValidationError
from .models import Entity, Field, Permission, Resource
from .resources import Taxonomy

log = logging.getLogger(__name__)

EntityKey = Entity | str
PermissionKey = Permission | str
Decisions = Mapping[EntityKey, Mapping[PermissionKey, Any]]

# Placeholder permission name for errors about a whole entry
ANY_PERMISSION = "*"


class MappingTable:
    """Total, read-only mapping from (entity, permission) to bool.

    Build instances with ``build_mapping_table``, which accepts identifiers
    and reports unknown entries. The constructor takes rows keyed by the
    taxonomy's own entities and permissions and still refuses an incomplete
    or non-boolean row with ValidationError.
    """

    __slots__ = ("_taxonomy", "_rows", "_by_identifier", "_digest")

    def __init__(self, taxonomy: Taxonomy, rows: Mapping[Entity, Mapping[Permission, bool]]):
        permissions = taxonomy.list_permissions()
        missing: list[tuple[str, str]] = []
        invalid: list[tuple[str, str]] = []
        for entity in taxonomy.list_entities():
            row = rows.get(entity, {})
            for p in permissions:
                if p not in row:
                    missing.append((entity.identifier, p.value))
                elif not isinstance(row[p], bool):
                    invalid.append((entity.identifier, p.value))
        if missing or invalid:
            raise ValidationError(missing=missing, invalid=invalid)
        self._taxonomy = taxonomy
        self._rows = MappingProxyType(
            {
                entity: MappingProxyType({p: rows[entity][p] for p in permissions})
                for entity in taxonomy.list_entities()
            }
        )
        self._by_identifier = MappingProxyType({e.identifier: row for e, row in self._rows.items()})
        self._digest = _table_digest(permissions, self._rows)

    @property
    def taxonomy(self) -> Taxonomy:
        return self._taxonomy

    def entities(self) -> tuple[Entity, ...]:
        return self._taxonomy.list_entities()

    def permissions(self) -> tuple[Permission, ...]:
        return self._taxonomy.list_permissions()

    def permission_set(self, entity: EntityKey) -> Mapping[Permission, bool]:
        return self._row(entity)

    def requires_permission(self, entity: EntityKey, permission: PermissionKey) -> bool:
        row = self._row(entity)
        identifier = entity.identifier if isinstance(entity, (Resource, Field)) else entity
        try:
            return row[Permission(permission)]
        except (ValueError, KeyError):
            raise NotFoundError(
                identifier, str(permission), reason=f"unknown permission {str(permission)!r} for {identifier!r}"
            ) from None

    def _row(self, entity: EntityKey) -> Mapping[Permission, bool]:
        if isinstance(entity, (Resource, Field)):
            row = self._rows.get(entity)
            identifier = entity.identifier
        elif isinstance(entity, str):
            row = self._by_identifier.get(entity)
            identifier = entity
        else:
            row, identifier = None, repr(entity)
        if row is None:
            raise NotFoundError(identifier, reason=f"unknown entity {identifier!r}")
        return row

    def as_dict(self) -> dict[str, dict[str, bool]]:
        return {
            entity.identifier: {p.value: allowed for p, allowed in row.items()}
            for entity, row in self._rows.items()
        }

    def digest(self) -> str:
        return self._digest

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MappingTable):
            return NotImplemented
        return self._taxonomy == other._taxonomy and self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        return hash(self._digest)

    def __repr__(self) -> str:
        return f"<MappingTable(entities={len(self._rows)}, digest={self._digest})>"


def _table_digest(permissions: tuple[Permission, ...], rows: Mapping[Entity, Mapping[Permission, bool]]) -> str:
    raw = json.dumps(
        {
            "permissions": [p.value for p in permissions],
            "rows": [[e.identifier, [row[p] for p in permissions]] for e, row in rows.items()],
        },
        separators=(",", ":"),
    )
    return "sha256:" + hashlib.sha256(raw.encode()).hexdigest()[:16]


def _resolve_entity(taxonomy: Taxonomy, key: Any) -> tuple[str, Entity | None]:
    if isinstance(key, (Resource, Field)):
        return key.identifier, key if key in taxonomy else None
    if isinstance(key, str):
        return key, taxonomy.get(key) if key in taxonomy else None
    return repr(key), None


def _resolve_permission(key: Any) -> tuple[str, Permission | None]:
    if isinstance(key, Permission):
        return key.value, key
    if isinstance(key, str):
        try:
            return key, Permission(key)
        except ValueError:
            return key, None
    return repr(key), None


def build_mapping_table(taxonomy: Taxonomy, decisions: Decisions) -> MappingTable:
    """
    Validate authored decisions against the taxonomy and build the table.

    Every entity of the taxonomy needs an explicit bool for every permission.
    All missing, unknown, non-boolean and conflicting pairs are reported in a
    single ValidationError; no table is returned unless all checks pass.
    """
    resolved: dict[Entity, dict[Permission, bool]] = {}
    reported: set[tuple[str, str]] = set()
    extra: list[tuple[str, str]] = []
    invalid: list[tuple[str, str]] = []
    conflicting: list[tuple[str, str]] = []

    for entity_key, entry in decisions.items():
        identifier, entity = _resolve_entity(taxonomy, entity_key)
        if not isinstance(entry, Mapping):
            (extra if entity is None else invalid).append((identifier, ANY_PERMISSION))
            if entity is not None:
                reported.update((identifier, p.value) for p in taxonomy.list_permissions())
            continue
        if entity is None and not entry:
            extra.append((identifier, ANY_PERMISSION))
            continue
        for permission_key, allowed in entry.items():
            permission_name, permission = _resolve_permission(permission_key)
            pair = (identifier, permission_name)
            if entity is None or permission is None:
                extra.append(pair)
                continue
            if not isinstance(allowed, bool):
                invalid.append(pair)
                reported.add(pair)
                continue
            row = resolved.setdefault(entity, {})
            if permission in row and row[permission] != allowed:
                conflicting.append(pair)
                continue
            row[permission] = allowed

    missing = [
        (entity.identifier, permission.value)
        for entity in taxonomy.list_entities()
        for permission in taxonomy.list_permissions()
        if permission not in resolved.get(entity, {}) and (entity.identifier, permission.value) not in reported
    ]
    if missing or extra or invalid or conflicting:
        error = ValidationError(
            missing=missing,
            extra=sorted(set(extra)),
            invalid=sorted(set(invalid)),
            conflicting=sorted(set(conflicting)),
        )
        log.error("Permission mapping rejected: %s", error)
        raise error

    table = MappingTable(taxonomy, resolved)
    log.info(
        "Built mapping table: %d entities x %d permissions (%s)",
        len(table),
        len(taxonomy.list_permissions()),
        table.digest(),
    )
    return table


def decisions_from_triples(triples: Iterable[tuple[EntityKey, PermissionKey, Any]]) -> dict[EntityKey, dict[PermissionKey, Any]]:
    """Fold (entity, permission, allowed) triples into a decisions mapping.

    Repeating a pair with the same value is accepted; repeating it with a
    different value raises ValidationError.
    """
    decisions: dict[EntityKey, dict[PermissionKey, Any]] = {}
    conflicting: set[tuple[str, str]] = set()
    for entity, permission, allowed in triples:
        entry = decisions.setdefault(entity, {})
        if permission in entry and entry[permission] != allowed:
            identifier = entity.identifier if isinstance(entity, (Resource, Field)) else str(entity)
            conflicting.add((identifier, str(permission)))
            continue
        entry[permission] = allowed
    if conflicting:
        raise ValidationError(conflicting=sorted(conflicting))
    return decisions
