"""Casebook error taxonomy.

Every error raised across the service boundary derives from `CasebookError`
and carries the kind of entity involved, its key and an `ErrorKind` used by
bulk operations to report per-item outcomes.
"""

from enum import Enum
from typing import ClassVar

# ============================================================================
#                               Error kinds
# ============================================================================


class ErrorKind(Enum):
    """Stable, transport-neutral names for each error class."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    CYCLE = "cycle"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    CONCURRENT_MODIFICATION = "concurrent_modification"


# ============================================================================
#                               Base error
# ============================================================================


class CasebookError(Exception):
    """Base class for all Casebook errors."""

    error_kind: ClassVar[ErrorKind]

    def __init__(self, kind: str, key: str, message: str | None = None) -> None:
        if message is None:
            message = f"{kind} ({key}) error"
        super().__init__(message)
        self.kind = kind
        self.key = key


# ============================================================================
#                               Concrete errors
# ============================================================================


class ValidationError(CasebookError):
    """Raised when input is malformed or violates a domain rule."""

    error_kind = ErrorKind.VALIDATION

    def __init__(self, kind: str, key: str, reason: str) -> None:
        super().__init__(kind, key, f"Invalid {kind} ({key}): {reason}")
        self.reason = reason


class ConflictError(CasebookError):
    """Raised on a uniqueness violation (sibling folder name, active tag name)."""

    error_kind = ErrorKind.CONFLICT

    def __init__(self, kind: str, key: str, reason: str = "name exists") -> None:
        super().__init__(kind, key, f"{kind} ({key}) conflict: {reason}")
        self.reason = reason


class CycleError(CasebookError):
    """Raised when a folder move would place a folder beneath itself."""

    error_kind = ErrorKind.CYCLE

    def __init__(self, folder_id: str, target_parent_id: str) -> None:
        super().__init__(
            "folder",
            folder_id,
            f"Cannot move folder ({folder_id}) under {target_parent_id}: "
            "target is the folder itself or one of its descendants",
        )
        self.target_parent_id = target_parent_id


class NotFoundError(CasebookError):
    """Raised for unknown ids, deleted records and out-of-range versions."""

    error_kind = ErrorKind.NOT_FOUND

    def __init__(self, kind: str, key: str, message: str | None = None) -> None:
        super().__init__(kind, key, message or f"{kind} ({key}) not found")


class PermissionDeniedError(CasebookError):
    """Raised when the permission predicate rejects an action."""

    error_kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, actor_id: str, action: str, target_id: str) -> None:
        super().__init__(
            "permission",
            target_id,
            f"Actor {actor_id!r} may not perform {action} on {target_id}",
        )
        self.actor_id = actor_id
        self.action = action


class ConcurrentModificationError(CasebookError):
    """Raised when an optimistic version check fails. Retryable."""

    error_kind = ErrorKind.CONCURRENT_MODIFICATION

    def __init__(self, kind: str, key: str, head: int, expected: int | None) -> None:
        super().__init__(
            kind,
            key,
            f"{kind} ({key}) version conflict: head={head}, expected={expected}",
        )
        self.head = head
        self.expected = expected
