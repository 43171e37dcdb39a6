"""Profile role enum for role-based access control."""

from enum import Enum as PyEnum


class Role(str, PyEnum):
    """
    Profile roles, a closed set of three.

    Permissions:
    - ADMIN: Everything, including inviting/provisioning new users
    - EDITOR: Read, create, edit and delete transactions, bills, etc.
    - VIEWER: Read-only access
    """

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object, default: "Role | None" = None) -> "Role":
        """
        Coerce a requested role value, falling back to VIEWER.

        Only for roles *requested* for someone else; a caller's own role is
        always read from storage.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return default or cls.VIEWER
