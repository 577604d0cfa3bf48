"""Reconstruct the acting user from an already-verified claim set.

Tokens carry a redacted snapshot of the user under the ``user`` claim. The
snapshot is validated field by field; unknown fields, missing ids and type
mismatches are rejected rather than silently dropped.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, NamedTuple, Optional

from pydantic import BaseModel, ValidationError

from provision.errors import ClaimError
from provision.schemas.user import User


class ClaimedUser(User):
    """User snapshot embedded in a token"""

    class Config:
        extra = "forbid"


class UserClaims(BaseModel):
    user: ClaimedUser
    exp: int


class ClaimSet(NamedTuple):
    """Claims as handed over by the token layer"""
    claims: Optional[Dict[str, Any]]
    valid: bool


def user_from_claims(claim_set: ClaimSet, now: Optional[datetime] = None) -> User:
    """Return the user described by ``claim_set``.

    Raises:
        ClaimError: the claims are missing, invalid, expired or malformed.
    """
    if not claim_set.valid or not claim_set.claims:
        raise ClaimError("missing or invalid token")

    try:
        parsed = UserClaims.model_validate(claim_set.claims)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in exc.errors())
        raise ClaimError(f"malformed user claims: {fields}") from exc

    now = now or datetime.now(timezone.utc)
    if parsed.exp <= int(now.timestamp()):
        raise ClaimError("token has expired")

    return User.model_validate(parsed.user.model_dump())


def user_claims(user: User, expires_at: int) -> Mapping[str, Any]:
    """Claims describing ``user``; the password must already be redacted."""
    return {"user": user.model_dump(), "exp": expires_at}
