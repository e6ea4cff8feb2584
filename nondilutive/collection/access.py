from __future__ import annotations

from .errors import NotAdministrator


def _norm(identity: object | None) -> str:
    return str(identity or "").strip()


class AccessControl:
    """Single-administrator access control."""

    def __init__(self, *, admin: str) -> None:
        a = _norm(admin)
        if not a:
            raise ValueError("admin is required")
        self._admin = a

    @property
    def admin(self) -> str:
        return self._admin

    def is_admin(self, caller: str | None) -> bool:
        return _norm(caller) == self._admin

    def require_admin(self, caller: str | None, *, operation: str) -> None:
        if not self.is_admin(caller):
            raise NotAdministrator(f"{operation} is restricted to the collection administrator")
