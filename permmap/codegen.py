# permmap - Generated artifacts (TypeScript source and JSON data file)
import logging
import re
from collections.abc import Iterable
from pathlib import Path

import pydantic

from .errors import ArtifactError, SchemaError, ValidationError
from .mapping import MappingTable, build_mapping_table
from .models import SEPARATOR, MappingArtifact, Permission, Resource, ResourceSpec
from .resources import Taxonomy

log = logging.getLogger(__name__)

HEADER = "// This file is auto-generated. Do not edit manually."
INDENT = "  "

_DIGEST_RE = re.compile(r"^// digest: (sha256:[0-9a-f]+)$", re.M)
_ENUM_RE = re.compile(r"^export enum (\w+) \{\n(.*?)^\}$", re.M | re.S)
_MEMBER_RE = re.compile(r'^  (\w+) = "([^"]*)",$', re.M)
_MAPPINGS_RE = re.compile(r"^const Mappings: PermissionMappings = \{\n(.*?)^\};$", re.M | re.S)
_ENTRY_RE = re.compile(r"^  \[(\w+)\.(\w+)\]: \{\n(.*?)^  \},$", re.M | re.S)
_VALUE_RE = re.compile(r"^    \[Permissions\.(\w+)\]: (true|false),$", re.M)


def _enum(name: str, members: Iterable[tuple[str, str]]) -> list[str]:
    lines = [f"export enum {name} {{"]
    lines.extend(f'{INDENT}{member} = "{value}",' for member, value in members)
    lines.append("}")
    return lines


def render_typescript(table: MappingTable) -> str:
    """Render the table as a TypeScript module with enums, Mappings and requiresPermission."""
    taxonomy = table.taxonomy
    permissions = table.permissions()
    resources = taxonomy.resources()

    lines = [HEADER, f"// digest: {table.digest()}", ""]
    lines += _enum("Permissions", ((p.value, p.value) for p in permissions))
    lines.append("")
    lines += _enum("Resources", ((r.name, r.identifier) for r in resources))
    for resource in resources:
        lines.append("")
        lines += _enum(resource.name, ((f.name, f.identifier) for f in taxonomy.fields(resource)))

    all_resources = " | ".join(["Resources"] + [r.name for r in resources])
    lines += [
        "",
        f"type AllResources = {all_resources};",
        "type PermissionResources = Record<Permissions, boolean>;",
        "type PermissionMappings = Record<AllResources, PermissionResources>;",
        "",
        "const Mappings: PermissionMappings = {",
    ]
    for entity in table.entities():
        key = f"Resources.{entity.name}" if isinstance(entity, Resource) else f"{entity.resource}.{entity.name}"
        row = table.permission_set(entity)
        lines.append(f"{INDENT}[{key}]: {{")
        lines += [f"{INDENT * 2}[Permissions.{p.value}]: {'true' if row[p] else 'false'}," for p in permissions]
        lines.append(f"{INDENT}}},")
    lines += [
        "};",
        "",
        "export function requiresPermission(resource: AllResources, permission: Permissions): boolean {",
        f"{INDENT}return Mappings[resource][permission];",
        "}",
        "",
    ]
    return "\n".join(lines)


def _check_permissions(values: list[str]) -> None:
    expected = [p.value for p in Permission]
    if values != expected:
        raise ArtifactError(f"artifact permissions {values} do not match {expected}")


def _rebuild(specs: list[ResourceSpec], decisions: dict, digest: str) -> MappingTable:
    try:
        table = build_mapping_table(Taxonomy(specs), decisions)
    except (SchemaError, ValidationError) as e:
        raise ArtifactError(f"artifact does not describe a valid table: {e}") from e
    if table.digest() != digest:
        raise ArtifactError(f"artifact digest {digest} does not match its contents ({table.digest()})")
    return table


def parse_typescript(text: str) -> MappingTable:
    """Read a module produced by render_typescript back into a table."""
    digest_match = _DIGEST_RE.search(text)
    if digest_match is None:
        raise ArtifactError("artifact has no digest header")

    enums: dict[str, list[tuple[str, str]]] = {}
    for name, body in _ENUM_RE.findall(text):
        if name in enums:
            raise ArtifactError(f"enum {name} declared twice")
        enums[name] = _MEMBER_RE.findall(body)
    if "Permissions" not in enums or "Resources" not in enums:
        raise ArtifactError("artifact is missing the Permissions or Resources enum")

    permissions = enums.pop("Permissions")
    if any(member != value for member, value in permissions):
        raise ArtifactError("Permissions enum members must equal their values")
    _check_permissions([value for _, value in permissions])

    specs = []
    for name, value in enums.pop("Resources"):
        if name != value:
            raise ArtifactError(f"resource {name} has identifier {value!r}")
        members = enums.pop(name, None)
        if members is None:
            raise ArtifactError(f"resource {name} has no field enum")
        for member, identifier in members:
            if identifier != f"{name}{SEPARATOR}{member}":
                raise ArtifactError(f"field {name}.{member} has identifier {identifier!r}")
        specs.append(ResourceSpec(name=name, fields=[member for member, _ in members]))
    if enums:
        raise ArtifactError(f"enums without a resource: {', '.join(enums)}")

    mappings = _MAPPINGS_RE.search(text)
    if mappings is None:
        raise ArtifactError("artifact has no Mappings literal")
    decisions: dict[str, dict[str, bool]] = {}
    for enum_name, member, body in _ENTRY_RE.findall(mappings.group(1)):
        identifier = member if enum_name == "Resources" else f"{enum_name}{SEPARATOR}{member}"
        if identifier in decisions:
            raise ArtifactError(f"duplicate Mappings entry for {identifier}")
        decisions[identifier] = {permission: value == "true" for permission, value in _VALUE_RE.findall(body)}

    return _rebuild(specs, decisions, digest_match.group(1))


def render_json(table: MappingTable) -> str:
    artifact = MappingArtifact(
        permissions=list(table.permissions()),
        resources=table.taxonomy.specs(),
        mappings=table.as_dict(),
        digest=table.digest(),
    )
    return artifact.model_dump_json(indent=2) + "\n"


def load_json(text: str) -> MappingTable:
    try:
        artifact = MappingArtifact.model_validate_json(text)
    except pydantic.ValidationError as e:
        raise ArtifactError(f"malformed JSON artifact: {e}") from e
    _check_permissions([p.value for p in artifact.permissions])
    return _rebuild(artifact.resources, artifact.mappings, artifact.digest)


def write_artifacts(
    table: MappingTable,
    output_dir: Path,
    typescript_name: str = "permissions.ts",
    json_name: str = "permissions.json",
) -> list[Path]:
    """Write both artifacts into output_dir and return their paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, content in ((typescript_name, render_typescript(table)), (json_name, render_json(table))):
        path = output_dir / name
        path.write_text(content, encoding="utf-8", newline="\n")
        log.info("Wrote %s (%s)", path, table.digest())
        written.append(path)
    return written
