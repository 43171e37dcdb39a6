"""Profile model: the role-bearing record for a principal."""

from sqlalchemy import String, Enum
from sqlalchemy.orm import Mapped, mapped_column

from shop_finance.models.base import Base, TimestampMixin
from shop_finance.models.role import Role


class Profile(Base, TimestampMixin):
    """
    One row per principal, keyed by the identity provider's user id.

    Written only by the provisioning flow (and out-of-band admin edits);
    never deleted by this service.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # id is the identity provider's user id (uuid)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=Role.VIEWER,
    )

    def __repr__(self) -> str:
        return f"<Profile(id='{self.id}', role={self.role.value})>"
