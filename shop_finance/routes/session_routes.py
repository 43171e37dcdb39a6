from fastapi import APIRouter, Depends

from shop_finance.dependencies import get_session_context
from shop_finance.services.capability_resolver import SessionContext
from shop_finance.schemas.session_schemas import SessionResponse

router = APIRouter()


@router.get("", response_model=SessionResponse)
async def get_session(context: SessionContext = Depends(get_session_context)):
    """
    Resolve the caller's session.

    - No token: status "unauthenticated", no capabilities
    - Profile missing: status "unprovisioned", no capabilities
    - Profile lookup failed: status "lookup_failed", no capabilities
    - Otherwise the role and its derived capabilities
    """
    return {
        "status": context.status,
        "user_id": context.principal.id if context.principal else None,
        "email": context.actor_email,
        "display_name": context.display_name,
        "role": context.role,
        "capabilities": context.capability.as_dict(),
        "can_write": context.can_write,
        "can_administer": context.can_administer,
    }
