"""Authenticated identity as reported by the identity provider."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Principal:
    """
    Authenticated caller identity.

    Attributes:
        id: Stable identity provider user id
        email: Email address (may be missing for phone-only identities)
        full_name: Display name from user metadata, if any
    """

    id: str
    email: str | None = None
    full_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_user_payload(cls, payload: dict[str, Any]) -> "Principal":
        """Build from an auth API user object ({"id", "email", "user_metadata"})."""
        metadata = payload.get("user_metadata") or {}
        return cls(
            id=str(payload["id"]),
            email=payload.get("email"),
            full_name=metadata.get("full_name"),
            metadata=metadata,
        )
