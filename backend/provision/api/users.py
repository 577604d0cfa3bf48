"""User endpoints"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from provision.api.deps import get_provisioner
from provision.errors import ProvisionError
from provision.middleware.monitoring import record_auth_failure, record_credential_merge
from provision.middleware.rate_limit import get_rate_limit, limiter
from provision.provisioner import Provisioner
from provision.schemas.store import PersistResult, SearchQuery, SearchResults
from provision.schemas.user import Auth, User, UserTokenResult
from provision.utils.jwt_utils import create_access_token
from provision.utils.logger import logger

router = APIRouter(tags=["users"])


@router.post("/user", response_model=PersistResult)
def upsert_user(
    user: User,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """
    Insert or replace a user

    ``password`` may be a new plaintext (hashed before storage), or empty /
    ``REDACTED`` to keep the stored password.
    """
    try:
        result = provisioner.upsert_user(user)
    except ProvisionError as exc:
        record_credential_merge("user", exc.code)
        logger.error(f"Upsert failure: {exc.message}", extra={"user_id": user.id, "action": "upsert_user"})
        raise

    record_credential_merge("user", "ok")
    return result


@router.get("/user/{user_id}", response_model=User)
def get_user(
    user_id: str,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Get a user by id (password redacted)"""
    return provisioner.get_user(user_id)


@router.post("/searchUsers", response_model=SearchResults)
def search_users(
    search: SearchQuery,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Search users (passwords redacted)"""
    return provisioner.search_users(search.model_dump(by_alias=True))


@router.post("/authUser", response_model=UserTokenResult)
@limiter.limit(get_rate_limit("auth_user"))
def auth_user(
    request: Request,
    auth: Auth,
    raw: bool = False,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """
    Authenticate a user with id and password

    Returns the user (password redacted) and a signed token. With
    ``?raw=true`` only the token is returned, as text/plain.
    """
    user, ok = provisioner.auth_user(auth)

    if user is None:
        record_auth_failure("password")
        return JSONResponse(
            status_code=401,
            content={"error": "AuthFailure", "message": "User account not found."},
        )

    if not ok:
        record_auth_failure("password")
        return JSONResponse(
            status_code=401,
            content={"error": "AuthFailure", "message": "Invalid credentials."},
        )

    token, _ = create_access_token(user)
    logger.info(f"Issued token for user {user.id}", extra={"user_id": user.id, "action": "auth_user"})

    if raw:
        return PlainTextResponse(token)

    return UserTokenResult(user=user, token=token)
