"""
Capability resolver: current principal -> profile -> capability set.

State is held in an explicit, immutable SessionContext that callers pass
down. Transitions:

    unauthenticated -> loading -> authenticated | unprovisioned | lookup_failed
    any state       -> unauthenticated              (sign-out / expiry)

Only `authenticated` carries any capability. Loading, unprovisioned and
lookup_failed all resolve to NO_CAPABILITY.
"""

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Awaitable, Callable, Optional

from shop_finance.core.log_config import get_logger
from shop_finance.models.capability import Capability, NO_CAPABILITY, capabilities_for
from shop_finance.models.principal import Principal
from shop_finance.models.profile import Profile
from shop_finance.models.role import Role

log = get_logger(__name__)

ProfileSource = Callable[[str], Awaitable[Optional[Profile]]]


class SessionStatus(str, PyEnum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNPROVISIONED = "unprovisioned"
    LOOKUP_FAILED = "lookup_failed"


@dataclass(frozen=True)
class SessionContext:
    """
    Snapshot of who is signed in and what they may do.

    Attributes:
        status: Lifecycle state
        principal: Signed-in identity, None when unauthenticated
        profile: Loaded profile, only set when authenticated
        error: Lookup failure message, only set when lookup_failed
    """

    status: SessionStatus
    principal: Optional[Principal] = None
    profile: Optional[Profile] = None
    error: Optional[str] = None

    @classmethod
    def unauthenticated(cls) -> "SessionContext":
        return cls(status=SessionStatus.UNAUTHENTICATED)

    @classmethod
    def loading(cls, principal: Principal) -> "SessionContext":
        return cls(status=SessionStatus.LOADING, principal=principal)

    @classmethod
    def authenticated(cls, principal: Principal, profile: Profile) -> "SessionContext":
        return cls(status=SessionStatus.AUTHENTICATED, principal=principal, profile=profile)

    @classmethod
    def unprovisioned(cls, principal: Principal) -> "SessionContext":
        return cls(status=SessionStatus.UNPROVISIONED, principal=principal)

    @classmethod
    def lookup_failed(cls, principal: Principal, error: str) -> "SessionContext":
        return cls(status=SessionStatus.LOOKUP_FAILED, principal=principal, error=error)

    @property
    def role(self) -> Optional[Role]:
        if self.status is not SessionStatus.AUTHENTICATED or self.profile is None:
            return None
        return self.profile.role

    @property
    def capability(self) -> Capability:
        # Re-derived on every access so a role change is never masked.
        role = self.role
        return capabilities_for(role) if role is not None else NO_CAPABILITY

    @property
    def can_write(self) -> bool:
        return self.capability.can_write

    @property
    def can_administer(self) -> bool:
        return self.capability.can_administer

    @property
    def actor_email(self) -> Optional[str]:
        return self.principal.email if self.principal is not None else None

    @property
    def display_name(self) -> str:
        if self.profile is not None and self.profile.full_name:
            return self.profile.full_name
        if self.principal is None:
            return ""
        return self.principal.full_name or self.principal.email or ""


class CapabilityResolver:
    """
    Tracks one client session and resolves its profile.

    Exactly one profile read per session transition; never retries on its
    own (call refresh()) and never writes to the profile store.
    """

    def __init__(self, profile_source: ProfileSource):
        self._profile_source = profile_source
        self._context = SessionContext.unauthenticated()
        self._generation = 0

    @property
    def context(self) -> SessionContext:
        return self._context

    async def session_changed(self, principal: Optional[Principal]) -> SessionContext:
        """
        React to sign-in, sign-out, token refresh or expiry.

        Args:
            principal: The new session's identity, or None when cleared

        Returns:
            The resolved context (also available as .context)
        """
        self._generation += 1

        if principal is None:
            self._context = SessionContext.unauthenticated()
            log.debug("session_cleared")
            return self._context

        return await self._load(principal, self._generation)

    async def refresh(self) -> SessionContext:
        """Manually re-read the profile for the current principal."""
        principal = self._context.principal
        if principal is None:
            return self._context
        self._generation += 1
        return await self._load(principal, self._generation)

    async def _load(self, principal: Principal, generation: int) -> SessionContext:
        self._context = SessionContext.loading(principal)

        try:
            profile = await self._profile_source(principal.id)
        except Exception as e:
            resolved = SessionContext.lookup_failed(principal, str(e) or "Profile lookup failed")
            log.warning("profile_lookup_failed", principal_id=principal.id, error=str(e))
        else:
            if profile is None:
                resolved = SessionContext.unprovisioned(principal)
                log.info("profile_not_provisioned", principal_id=principal.id)
            else:
                resolved = SessionContext.authenticated(principal, profile)

        # A newer transition happened while we were waiting: drop this result.
        if generation != self._generation:
            return self._context

        self._context = resolved
        return resolved
