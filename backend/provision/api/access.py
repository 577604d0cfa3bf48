"""Access check endpoints: evaluate the token's user against an AccessCheck"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from provision.api.deps import require_user
from provision.middleware.monitoring import record_access_decision
from provision.middleware.rate_limit import get_rate_limit, limiter
from provision.schemas.access import AccessCheck, AccessCheckResult
from provision.schemas.user import User
from provision.utils.access import check_access, check_admin_access

router = APIRouter(tags=["access"])


def _respond(result: AccessCheckResult) -> JSONResponse:
    """200 when granted, 401 when denied; the body is the result either way"""
    return JSONResponse(
        status_code=200 if result.status else 401,
        content=result.model_dump(),
    )


@router.post("/userHasAccess", response_model=AccessCheckResult)
@limiter.limit(get_rate_limit("access_check"))
def user_has_access(
    request: Request,
    check: AccessCheck,
    user: User = Depends(require_user),
):
    """Does the token's user have member access to the accounts and sections?"""
    result = check_access(user, check)
    record_access_decision("access", result.status)
    return _respond(result)


@router.post("/userHasAdminAccess", response_model=AccessCheckResult)
@limiter.limit(get_rate_limit("access_check"))
def user_has_admin_access(
    request: Request,
    check: AccessCheck,
    user: User = Depends(require_user),
):
    """Does the token's user administer the (single) account?"""
    result = check_admin_access(user, check)
    record_access_decision("admin", result.status)
    return _respond(result)
