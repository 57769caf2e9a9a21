# permmap - Lookup API and fail-closed authorization check
import logging

from .audit import AuditLog
from .errors import NotFoundError
from .mapping import EntityKey, MappingTable, PermissionKey
from .models import AuditLogEntry, Field, PolicyDecision, Resource

log = logging.getLogger(__name__)


def requires_permission(table: MappingTable, entity: EntityKey, permission: PermissionKey) -> bool:
    """
    Return the table's decision for (entity, permission).

    Raises NotFoundError when either is not part of the table's taxonomy;
    an unknown pair is never reported as a plain False.
    """
    return table.requires_permission(entity, permission)


def check_permission(
    table: MappingTable,
    entity: EntityKey,
    permission: PermissionKey,
    audit_log: AuditLog | None = None,
) -> PolicyDecision:
    """Evaluate a lookup for an authorization check, turning unknown input into NOT_FOUND."""
    identifier = entity.identifier if isinstance(entity, (Resource, Field)) else str(entity)
    details: dict[str, str] = {}
    try:
        allowed = table.requires_permission(entity, permission)
    except NotFoundError as e:
        log.warning("Denying %s/%s: %s", identifier, permission, e)
        decision = PolicyDecision.NOT_FOUND
        details["reason"] = str(e)
    else:
        decision = PolicyDecision.ALLOW if allowed else PolicyDecision.DENY
    if audit_log is not None:
        audit_log.record(
            AuditLogEntry(
                entity=identifier,
                permission=str(permission),
                policy_decision=decision,
                table_digest=table.digest(),
                details=details,
            )
        )
    return decision


def is_permitted(
    table: MappingTable,
    entity: EntityKey,
    permission: PermissionKey,
    audit_log: AuditLog | None = None,
) -> bool:
    """Fail-closed variant of requires_permission: only an explicit allow is True."""
    return check_permission(table, entity, permission, audit_log) is PolicyDecision.ALLOW
