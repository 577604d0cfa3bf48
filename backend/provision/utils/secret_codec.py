"""Secret field codec: hashes, verifies and redacts secret values.

Secrets (user passwords, account access keys) are stored as bcrypt digests.
Every outward-facing read replaces them with the redaction sentinel, and the
same sentinel (or an empty string) on the write path means "keep the stored
value".
"""
import bcrypt

from provision.config import EngineConfig
from provision.errors import WeakSecretError
from provision.schemas.account import Account
from provision.schemas.user import User

# bcrypt only consumes the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72


class SecretCodec:
    """Hashes, verifies and redacts individual secret values."""

    def __init__(self, config: EngineConfig):
        self.cost = config.hash_cost
        self.min_length = config.min_secret_length
        self.sentinel = config.redact_msg

    def hash(self, plaintext: str, field: str = "secret") -> str:
        """Return a salted bcrypt digest of ``plaintext``.

        Raises:
            WeakSecretError: if ``plaintext`` is shorter than the minimum
                length or longer than bcrypt can consume.
        """
        if len(plaintext) < self.min_length:
            raise WeakSecretError(f"{field} must be at least {self.min_length} characters")

        encoded = plaintext.encode("utf-8")
        if len(encoded) > _BCRYPT_MAX_BYTES:
            raise WeakSecretError(f"{field} must be at most {_BCRYPT_MAX_BYTES} bytes")

        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.cost)).decode("utf-8")

    def verify(self, digest: str, candidate: str) -> bool:
        """Return True if ``candidate`` matches ``digest``.

        A wrong candidate, an empty or redacted digest and a malformed digest
        all return False.
        """
        if not digest or digest == self.sentinel:
            return False
        try:
            return bcrypt.checkpw(candidate.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            return False

    def redact(self, value: str) -> str:
        """Replace a secret with the redaction sentinel"""
        return self.sentinel

    def is_unchanged(self, value: str) -> bool:
        """True for the write-path markers meaning "keep the stored value"."""
        return value == "" or value == self.sentinel

    def redact_user(self, user: User) -> User:
        """Copy of ``user`` safe to return to a caller"""
        return user.model_copy(update={"password": self.redact(user.password)})

    def redact_account(self, account: Account) -> Account:
        """Copy of ``account`` with every access key redacted"""
        keys = [
            access_key.model_copy(update={"key": self.redact(access_key.key)})
            for access_key in account.access_keys
        ]
        return account.model_copy(update={"access_keys": keys})
