"""Repository for Profile model operations."""

from sqlalchemy.orm import Session
from shop_finance.models.profile import Profile
from shop_finance.models.role import Role


class ProfileRepository:
    """Single-row keyed reads and upserts on profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, profile_id: str) -> Profile | None:
        """
        Get profile by principal id.

        Args:
            profile_id: Identity provider user id

        Returns:
            Profile object or None if the principal is not provisioned
        """
        return self.db.query(Profile).filter(Profile.id == profile_id).first()

    def upsert(
        self, profile_id: str, full_name: str, role: Role
    ) -> tuple[Profile, bool, dict]:
        """
        Insert or update a profile's name and role.

        Does not commit; the caller commits together with its audit entry.

        Args:
            profile_id: Identity provider user id
            full_name: Display name
            role: Role to assign

        Returns:
            Tuple of (profile, created, changes) where changes maps
            field -> {old, new} and is empty for an unchanged existing profile
        """
        profile = self.get_by_id(profile_id)

        if profile is None:
            profile = Profile(id=profile_id, full_name=full_name, role=role)
            self.db.add(profile)
            self.db.flush()
            changes = {
                "full_name": {"new": full_name},
                "role": {"new": role.value},
            }
            return profile, True, changes

        changes = {}
        if profile.full_name != full_name:
            changes["full_name"] = {"old": profile.full_name, "new": full_name}
            profile.full_name = full_name
        if profile.role != role:
            changes["role"] = {"old": profile.role.value, "new": role.value}
            profile.role = role
        self.db.flush()
        return profile, False, changes
