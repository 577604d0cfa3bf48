"""API dependencies for the document store, the provisioner and user authentication.

User authentication takes ``Authorization: Bearer <JWT>`` as issued by
``POST /authUser``. The token's ``user`` claim is validated into a
:class:`User`; an invalid, expired or missing token, or an inactive user,
is rejected with 401 before any access decision is made.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from provision.config import settings
from provision.errors import ClaimError
from provision.middleware.monitoring import record_auth_failure
from provision.provisioner import Provisioner
from provision.schemas.user import User
from provision.store import DocumentStore, create_store
from provision.utils.access import has_basic_access
from provision.utils.claims import user_from_claims
from provision.utils.jwt_utils import decode_access_token

_bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_store() -> DocumentStore:
    """The process-wide document store, built from settings on first use."""
    return create_store(settings)


def get_provisioner(store: DocumentStore = Depends(get_store)) -> Provisioner:
    return Provisioner(settings.engine_config(), store)


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> User:
    """Require a valid user token and return the acting user."""
    if not credentials:
        record_auth_failure("token")
        raise ClaimError("Authentication required. Provide Authorization: Bearer <token>.")

    try:
        user = user_from_claims(decode_access_token(credentials.credentials))
    except ClaimError:
        record_auth_failure("token")
        raise

    if not has_basic_access(user):
        record_auth_failure("inactive")
        raise ClaimError(f"user {user.id} is not active")

    return user
