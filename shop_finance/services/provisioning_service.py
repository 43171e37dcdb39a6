from typing import Any
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shop_finance.core.exceptions import (
    ForbiddenException,
    InvalidInputException,
    ProfileLookupException,
    ProfileSyncException,
)
from shop_finance.core.log_config import get_logger
from shop_finance.core.security import extract_bearer_token
from shop_finance.models.audit_log import AuditAction
from shop_finance.models.principal import Principal
from shop_finance.models.profile import Profile
from shop_finance.models.role import Role
from shop_finance.repositories.audit_log_repository import AuditLogRepository
from shop_finance.repositories.profile_repository import ProfileRepository
from shop_finance.schemas.invite_schemas import InviteRequest, InviteResult
from shop_finance.services.identity_client import IdentityClient

log = get_logger(__name__)


class ProvisioningService:
    """
    The only code path that creates principals and assigns their role.

    Each call walks the gates in order and stops at the first failure:
    bearer present -> token verified -> caller is admin -> input valid ->
    invite -> profile upsert. Nothing is rolled back; an invite that
    succeeded before a failed upsert stays as it is.
    """

    def __init__(self, db: Session, identity: IdentityClient):
        self.db = db
        self.identity = identity
        self.profile_repo = ProfileRepository(db)
        self.audit_repo = AuditLogRepository(db)

    async def provision(self, authorization: str | None, body: Any) -> InviteResult:
        """
        Invite a user and assign their role on behalf of an admin caller.

        Args:
            authorization: Raw Authorization header
            body: Decoded JSON request body

        Returns:
            InviteResult with the new principal's id

        Raises:
            UnauthenticatedException: Missing or malformed bearer token
            InvalidTokenException: Identity provider rejected the token
            ProfileLookupException: Caller's profile could not be read
            ForbiddenException: Caller has no profile or is not admin
            InvalidInputException: Missing email / fullName
            InviteFailedException: Identity provider rejected the invite
            ProfileSyncException: Invite succeeded but the role was not stored
        """
        # 1. Well-formed bearer token, checked locally
        token = extract_bearer_token(authorization)

        # 2. Token -> caller identity
        caller = await self.identity.get_user(token)

        # 3. Caller role from storage, never from the body or token claims
        caller_profile = await run_in_threadpool(self._load_caller_profile, caller.id)
        if caller_profile is None or caller_profile.role != Role.ADMIN:
            log.info("provision_forbidden", caller_id=caller.id)
            raise ForbiddenException("Forbidden (admin only)")

        # 4. Input
        request = self._parse(body)
        role = Role.parse(request.role)

        # 5. Invite or re-invite
        invited = await self.identity.invite_user_by_email(
            request.email, data={"full_name": request.full_name}
        )
        log.info("principal_invited", caller_id=caller.id, user_id=invited.id, role=role.value)

        # 6. Keep the role in sync with the latest request, even on re-invite
        await run_in_threadpool(self._sync_profile, caller, invited, request.full_name, role)

        # 7.
        return InviteResult(user_id=invited.id)

    def _load_caller_profile(self, caller_id: str) -> Profile | None:
        try:
            return self.profile_repo.get_by_id(caller_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("caller_profile_lookup_failed", caller_id=caller_id, error=str(e))
            raise ProfileLookupException(str(e) or "Profile lookup failed") from e

    def _sync_profile(self, caller: Principal, invited: Principal, full_name: str, role: Role) -> None:
        try:
            profile, created, changes = self.profile_repo.upsert(invited.id, full_name, role)
            self.audit_repo.record(
                "profiles",
                AuditAction.INSERT if created else AuditAction.UPDATE,
                profile.id,
                caller.email,
                changes,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("profile_sync_failed", user_id=invited.id, role=role.value, error=str(e))
            raise ProfileSyncException(
                "User invited but role could not be saved; resubmit to retry", invited.id
            ) from e

    @staticmethod
    def _parse(body: Any) -> InviteRequest:
        if not isinstance(body, dict):
            raise InvalidInputException("Missing fields")
        try:
            return InviteRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidInputException("Missing fields") from e
