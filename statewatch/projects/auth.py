"""
Role checks for project mutations.

The repository only sees the ``RoleChecker`` interface, so the identity
provider behind it can be swapped (or faked in tests).
"""
from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from statewatch.config import ADMIN_ROLE, ADMIN_USER_IDS


class RoleChecker(Protocol):
    def has_role(self, actor_id: str, role: str) -> bool:
        ...


class StaticRoleChecker:
    """Role claims held in memory, seeded from config or by the caller.

    Nothing is cached on the caller's side: every ``has_role`` call reads the
    current grants, so a revoke is visible on the next request.
    """

    def __init__(
        self,
        admin_ids: Iterable[str] = (),
        roles: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> None:
        self._roles: dict[str, set[str]] = {}
        for actor_id in admin_ids:
            self.grant(actor_id, ADMIN_ROLE)
        for actor_id, actor_roles in (roles or {}).items():
            for role in actor_roles:
                self.grant(actor_id, role)

    @classmethod
    def from_config(cls) -> "StaticRoleChecker":
        return cls(admin_ids=ADMIN_USER_IDS)

    def has_role(self, actor_id: str, role: str) -> bool:
        if not actor_id:
            return False
        return role in self._roles.get(actor_id, set())

    def grant(self, actor_id: str, role: str) -> None:
        self._roles.setdefault(actor_id, set()).add(role)

    def revoke(self, actor_id: str, role: str) -> None:
        self._roles.get(actor_id, set()).discard(role)
