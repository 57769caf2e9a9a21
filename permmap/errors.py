# permmap - Error types (schema authoring, table validation, lookup)


class PermissionMapError(Exception):
    """Base class for every error raised by permmap."""


class SchemaError(PermissionMapError):
    """Malformed or ambiguous resource/field names found at authoring time."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("invalid schema: " + "; ".join(self.problems))


Pair = tuple[str, str]


def _format_pairs(pairs: list[Pair]) -> str:
    return ", ".join(f"{entity}/{permission}" for entity, permission in pairs)


class ValidationError(PermissionMapError):
    """Permission decisions that do not cover the taxonomy exactly.

    Every offending (entity identifier, permission) pair is collected before
    raising, grouped by kind of problem.
    """

    def __init__(
        self,
        missing: list[Pair] | None = None,
        extra: list[Pair] | None = None,
        invalid: list[Pair] | None = None,
        conflicting: list[Pair] | None = None,
    ):
        self.missing = list(missing or [])
        self.extra = list(extra or [])
        self.invalid = list(invalid or [])
        self.conflicting = list(conflicting or [])
        parts = []
        if self.missing:
            parts.append(f"missing decisions: {_format_pairs(self.missing)}")
        if self.extra:
            parts.append(f"unknown entries: {_format_pairs(self.extra)}")
        if self.invalid:
            parts.append(f"non-boolean decisions: {_format_pairs(self.invalid)}")
        if self.conflicting:
            parts.append(f"conflicting decisions: {_format_pairs(self.conflicting)}")
        super().__init__("; ".join(parts) or "invalid permission decisions")

    @property
    def pairs(self) -> list[Pair]:
        return self.missing + self.extra + self.invalid + self.conflicting


class NotFoundError(PermissionMapError, LookupError):
    """Lookup against an entity or permission the table does not know."""

    def __init__(self, entity: str, permission: str | None = None, reason: str = ""):
        self.entity = entity
        self.permission = permission
        self.reason = reason
        if reason:
            message = reason
        elif permission is None:
            message = f"unknown entity {entity!r}"
        else:
            message = f"unknown entity/permission {entity!r}/{permission!r}"
        super().__init__(message)


class ArtifactError(PermissionMapError):
    """A generated artifact could not be read back into a table."""
