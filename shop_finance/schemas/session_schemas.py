from typing import Optional
from pydantic import BaseModel

from shop_finance.models.role import Role
from shop_finance.services.capability_resolver import SessionStatus


class CapabilityResponse(BaseModel):
    read: bool
    write: bool
    delete: bool
    provision: bool


class SessionResponse(BaseModel):
    """Resolved session as consumed by the front-end"""

    status: SessionStatus
    user_id: Optional[str]
    email: Optional[str]
    display_name: str
    role: Optional[Role]
    capabilities: CapabilityResponse
    can_write: bool
    can_administer: bool
