"""
Read-only API routes: mapping table artifacts, single lookups, audit sample.

The table and audit log are built by the app's lifespan hook and read from
``request.app.state``; nothing here mutates them.
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from permmap import AuditLog, MappingTable, render_json, render_typescript
from permmap.models import PolicyDecision
from permmap.policy import check_permission

router = APIRouter(prefix="/api", tags=["Permissions"])


def _table(request: Request) -> MappingTable:
    return request.app.state.mapping_table


def _audit_log(request: Request) -> AuditLog:
    return request.app.state.audit_log


# ============ ARTIFACTS ============

@router.get("/permissions")
async def get_permission_mappings(request: Request):
    """Full table as the JSON artifact."""
    return Response(content=render_json(_table(request)), media_type="application/json")


@router.get("/permissions/typescript", response_class=PlainTextResponse)
async def get_typescript_artifact(request: Request):
    return PlainTextResponse(render_typescript(_table(request)), media_type="text/plain")


# ============ LOOKUP ============

@router.get("/permissions/{identifier}/{permission}")
def lookup_permission(identifier: str, permission: str, request: Request):
    """Decision for one (entity, permission) pair; 404 when either is unknown.

    Plain def: the audit log may append to a file, so FastAPI runs this in its threadpool.
    """
    table = _table(request)
    decision = check_permission(table, identifier, permission, _audit_log(request))
    if decision is PolicyDecision.NOT_FOUND:
        raise HTTPException(status_code=404, detail=f"{identifier}/{permission} is not in the permission table")
    return {
        "entity": identifier,
        "permission": permission,
        "allowed": decision is PolicyDecision.ALLOW,
        "digest": table.digest(),
    }


# ============ AUDIT ============

@router.get("/audit/sample")
async def audit_sample(request: Request, limit: int = 20):
    """Recent authorization checks."""
    entries = _audit_log(request).sample(limit)
    return {"total_entries": _audit_log(request).total, "entries": entries}
