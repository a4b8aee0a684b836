"""Permission predicate adapters."""

from collections.abc import Iterable

from casebook.interfaces.permissions import Action, PermissionChecker

# pylint: disable=too-few-public-methods

WILDCARD = "*"


class AllowAllPermissions(PermissionChecker):
    """Permit everything. Used by the CLI and most tests."""

    def can_perform(self, actor_id: str, action: Action, target_id: str) -> bool:
        return True


class StaticPermissions(PermissionChecker):
    """Permit only the listed grants.

    Each grant is an ``(actor_id, action, target_id)`` triple; ``"*"`` in the
    actor or target slot matches anything.
    """

    def __init__(self, grants: Iterable[tuple[str, Action, str]]) -> None:
        self._grants = set(grants)

    def can_perform(self, actor_id: str, action: Action, target_id: str) -> bool:
        return any(
            (actor, action, target) in self._grants
            for actor in (actor_id, WILDCARD)
            for target in (target_id, WILDCARD)
        )
