"""JWT utilities: RS256 keypair management, token signing and verification"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from jose import JWTError, jwt

from provision.config import settings
from provision.schemas.user import User
from provision.utils.claims import ClaimSet, user_claims
from provision.utils.logger import logger

# ---------------------------------------------------------------------------
# Keypair management
# ---------------------------------------------------------------------------

_private_key: Any = None   # cryptography RSAPrivateKey object
_public_key: Any = None    # cryptography RSAPublicKey object


def _load_keypair() -> None:
    """Load or auto-generate the RSA keypair.

    Reads JWT_PRIVATE_KEY from settings (PEM string). If absent, generates a
    fresh RSA-2048 keypair for this process; tokens then do not survive a
    restart.
    """
    global _private_key, _public_key

    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    if settings.JWT_PRIVATE_KEY:
        pem = settings.JWT_PRIVATE_KEY.encode()
        _private_key = serialization.load_pem_private_key(pem, password=None)
        logger.info("JWT keypair loaded from JWT_PRIVATE_KEY setting")
    else:
        _private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        logger.warning(
            "JWT_PRIVATE_KEY not set; auto-generated RSA-2048 keypair for this session. "
            "All tokens will be invalidated on restart."
        )
    _public_key = _private_key.public_key()


def get_private_key() -> Any:
    """Return the loaded private key, initialising on first call."""
    if _private_key is None:
        _load_keypair()
    return _private_key


def get_public_key() -> Any:
    """Return the loaded public key, initialising on first call."""
    if _public_key is None:
        _load_keypair()
    return _public_key


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------

def create_access_token(user: User) -> Tuple[str, int]:
    """Sign a token carrying ``user`` (already redacted).

    Returns:
        The signed JWT and its lifetime in seconds.
    """
    now = int(datetime.now(timezone.utc).timestamp())

    payload: Dict[str, Any] = {
        "sub": user.id,
        "jti": str(uuid.uuid4()),
        "iat": now,
        **user_claims(user, now + settings.JWT_EXPIRE_SECONDS),
    }

    headers = {"kid": settings.JWT_KEY_ID} if settings.JWT_KEY_ID else None
    token = jwt.encode(payload, get_private_key(), algorithm=settings.JWT_ALGORITHM, headers=headers)
    return token, settings.JWT_EXPIRE_SECONDS


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def decode_access_token(token: str) -> ClaimSet:
    """Verify a JWT signature and hand back its claims.

    Expiry is checked again when the user is reconstructed from the claims.
    """
    try:
        payload = jwt.decode(
            token,
            get_public_key(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as exc:
        logger.debug(f"JWT decode failed: {exc}")
        return ClaimSet(claims=None, valid=False)

    return ClaimSet(claims=payload, valid=True)
