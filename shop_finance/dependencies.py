from typing import Callable
from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from shop_finance.config import settings
from shop_finance.core.exceptions import (
    ForbiddenException,
    ProfileLookupException,
    UnauthenticatedException,
)
from shop_finance.core.security import ensure_well_formed
from shop_finance.database import get_db
from shop_finance.models.capability import CAPABILITY_NAMES
from shop_finance.repositories.profile_repository import ProfileRepository
from shop_finance.services.capability_resolver import (
    CapabilityResolver,
    SessionContext,
    SessionStatus,
)
from shop_finance.services.identity_client import IdentityClient

security = HTTPBearer(auto_error=False)

IdentityClientFactory = Callable[[], IdentityClient]


def get_identity_client_factory(request: Request) -> IdentityClientFactory:
    """
    FastAPI dependency returning a factory for the identity client.

    Construction is deferred so callers decide when a missing platform
    configuration should surface.
    """

    def factory() -> IdentityClient:
        return IdentityClient(settings, request.app.state.http)

    return factory


async def get_session_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    identity_factory: IdentityClientFactory = Depends(get_identity_client_factory),
    db: Session = Depends(get_db),
) -> SessionContext:
    """
    FastAPI dependency resolving the caller's session and capabilities.

    Flow:
    1. No Authorization header -> unauthenticated context (no capability)
    2. Token must be a well-formed JWT, else 401
    3. Token exchanged with the identity provider, else 401
    4. Profile looked up once; missing -> unprovisioned, failure -> lookup_failed

    Raises:
        UnauthenticatedException: If the token is malformed
        InvalidTokenException: If the identity provider rejects it
    """
    if credentials is None or not credentials.credentials:
        return SessionContext.unauthenticated()

    token = ensure_well_formed(credentials.credentials)
    principal = await identity_factory().get_user(token)

    profile_repo = ProfileRepository(db)

    async def load_profile(principal_id: str):
        return await run_in_threadpool(profile_repo.get_by_id, principal_id)

    resolver = CapabilityResolver(load_profile)
    return await resolver.session_changed(principal)


def require_capability(capability: str):
    """
    Dependency factory gating a route on one capability.

    Usage:
        @router.post("", dependencies=[Depends(require_capability("write"))])
    """
    if capability not in CAPABILITY_NAMES:
        raise ValueError(f"Unknown capability: {capability}")

    def _dep(context: SessionContext = Depends(get_session_context)) -> SessionContext:
        if context.status is SessionStatus.UNAUTHENTICATED:
            raise UnauthenticatedException("Not authenticated")
        if context.status is SessionStatus.LOOKUP_FAILED:
            raise ProfileLookupException(context.error or "Profile lookup failed")
        if context.status is SessionStatus.UNPROVISIONED:
            raise ForbiddenException("Account not provisioned yet. Ask an admin for access.")
        if not context.capability.allows(capability):
            raise ForbiddenException(f"Your role does not allow '{capability}'")
        return context

    return _dep
