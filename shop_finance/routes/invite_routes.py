"""
Invite function: the one privileged endpoint.

Browser-facing and called cross-origin, so every response carries its own
permissive CORS headers and errors use the `{"error": ...}` shape instead of
the API's `{"detail": ...}`.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from shop_finance.core.exceptions import FinanceTrackerException, ProfileSyncException
from shop_finance.core.log_config import get_logger
from shop_finance.database import get_db
from shop_finance.dependencies import IdentityClientFactory, get_identity_client_factory
from shop_finance.services.provisioning_service import ProvisioningService

log = get_logger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message, **extra}, headers=CORS_HEADERS
    )


@router.options("")
async def invite_preflight():
    """Browser preflight."""
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post("")
async def invite(
    request: Request,
    identity_factory: IdentityClientFactory = Depends(get_identity_client_factory),
    db: Session = Depends(get_db),
):
    """
    Invite a user by email and assign their role.

    - Requires `Authorization: Bearer <token>` of an **ADMIN**
    - Body: `{"email", "fullName", "role"?, "password"?}`; role defaults to viewer
    - 401 bad/missing token, 403 not admin, 400 bad input or invite rejected,
      503 caller profile unreadable, 500 server misconfigured or role not saved
      after invite
    """
    try:
        service = ProvisioningService(db, identity_factory())
        result = await service.provision(
            request.headers.get("Authorization"), await _json_body(request)
        )
    except ProfileSyncException as e:
        return _error(e.status_code, str(e), user_id=e.user_id)
    except FinanceTrackerException as e:
        return _error(e.status_code, str(e))

    return JSONResponse(content=result.model_dump(), headers=CORS_HEADERS)


@router.api_route("", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def invite_method_not_allowed():
    return _error(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")


async def _json_body(request: Request):
    # Parsed lazily; an unreadable body is only an error once the caller is authorized.
    try:
        return await request.json()
    except ValueError:
        return None
