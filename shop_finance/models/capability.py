"""Derived permission set for a profile role."""

from dataclasses import dataclass

from shop_finance.models.role import Role


@dataclass(frozen=True)
class Capability:
    """
    What a role may do. Never persisted; always derived from Profile.role.

    Attributes:
        read: View transactions, bills, reports
        write: Create and edit records
        delete: Delete records
        provision: Invite users and see the audit log
    """

    read: bool = False
    write: bool = False
    delete: bool = False
    provision: bool = False

    @property
    def can_write(self) -> bool:
        return self.write

    @property
    def can_administer(self) -> bool:
        return self.provision

    def allows(self, action: str) -> bool:
        """Check a capability by name ("read", "write", "delete", "provision")."""
        if action not in CAPABILITY_NAMES:
            raise ValueError(f"Unknown capability: {action}")
        return bool(getattr(self, action))

    def as_dict(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in CAPABILITY_NAMES}


CAPABILITY_NAMES = ("read", "write", "delete", "provision")

NO_CAPABILITY = Capability()

_ROLE_CAPABILITIES: dict[Role, Capability] = {
    Role.VIEWER: Capability(read=True),
    Role.EDITOR: Capability(read=True, write=True, delete=True),
    Role.ADMIN: Capability(read=True, write=True, delete=True, provision=True),
}


def capabilities_for(role: Role | str | None) -> Capability:
    """
    Map a role to its capability set.

    Unknown or missing roles get NO_CAPABILITY; this never falls back to a
    default role.
    """
    if role is None:
        return NO_CAPABILITY
    try:
        return _ROLE_CAPABILITIES[Role(role)]
    except ValueError:
        return NO_CAPABILITY
