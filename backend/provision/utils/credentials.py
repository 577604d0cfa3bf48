"""Credential merge policy: resolves secret fields before a full-document write.

The document store replaces whole documents, so an update that omits a
secret (empty string) or echoes the redaction sentinel back must carry the
stored digest forward. Anything else is a new plaintext and gets hashed.

Per secret field:
  1. fetch the stored document, unredacted
  2. empty or sentinel  -> stored digest, or MissingSecretError if none
  3. plaintext          -> codec hash (WeakSecretError below the minimum)
  4. lookup failure     -> BackingStoreError, never treated as "new"

Access keys are matched to stored keys by ``name``, never by list position.
The incoming document is never mutated; a merged copy is returned only once
every field has resolved.
"""
from typing import Optional

from provision.errors import MissingSecretError
from provision.schemas.account import AccessKey, Account
from provision.schemas.user import User
from provision.store.base import IDX_ACCOUNT, IDX_USER, DocumentStore
from provision.utils.logger import logger
from provision.utils.secret_codec import SecretCodec


class CredentialMergePolicy:
    """Read-merge-write resolution of user passwords and account access keys."""

    def __init__(self, codec: SecretCodec, store: DocumentStore):
        self.codec = codec
        self.store = store

    # ---------------------------------------------------------------------------
    # Stored document lookups (never redacted)
    # ---------------------------------------------------------------------------

    def stored_user(self, user_id: str) -> Optional[User]:
        result = self.store.fetch(IDX_USER, user_id)
        return User.model_validate(result.document) if result.found else None

    def stored_account(self, account_id: str) -> Optional[Account]:
        result = self.store.fetch(IDX_ACCOUNT, account_id)
        return Account.model_validate(result.document) if result.found else None

    # ---------------------------------------------------------------------------
    # Single secret field
    # ---------------------------------------------------------------------------

    def resolve_secret(self, incoming: str, stored: Optional[str], field: str) -> str:
        """Resolve one secret field against its stored digest.

        Args:
            incoming: Value from the request (plaintext, empty or sentinel).
            stored:   Stored digest, or None when nothing is stored.
            field:    Field name used in error messages.

        Returns:
            The digest to persist.
        """
        if self.codec.is_unchanged(incoming):
            if stored is None:
                raise MissingSecretError(f"{field} is required")
            return stored

        return self.codec.hash(incoming, field=field)

    # ---------------------------------------------------------------------------
    # Documents
    # ---------------------------------------------------------------------------

    def merge_user(self, user: User, existing: Optional[User]) -> User:
        """Return ``user`` with its password resolved against ``existing``."""
        stored = existing.password if existing is not None else None
        password = self.resolve_secret(user.password, stored, field="password")
        return user.model_copy(update={"password": password})

    def merge_account(self, account: Account, existing: Optional[Account]) -> Account:
        """Return ``account`` with every access key resolved against ``existing``.

        Keys are processed in incoming order; the first failure aborts the
        whole merge.
        """
        merged_keys = []
        for access_key in account.access_keys:
            stored_key = existing.find_key(access_key.name) if existing is not None else None
            stored = stored_key.key if stored_key is not None else None

            digest = self.resolve_secret(access_key.key, stored, field=f"access key '{access_key.name}'")
            merged_keys.append(AccessKey(
                name=access_key.name,
                description=access_key.description,
                key=digest,
                active=access_key.active,
            ))

        update = {"access_keys": merged_keys}
        if existing is not None:
            # org_id is owned by the stored account
            update["org_id"] = existing.org_id
        return account.model_copy(update=update)

    def resolve_user(self, user: User) -> User:
        """Fetch the stored user and merge the incoming password."""
        merged = self.merge_user(user, self.stored_user(user.id))
        logger.debug(f"Resolved password for user {user.id}", extra={"user_id": user.id, "action": "merge_secrets"})
        return merged

    def resolve_account(self, account: Account) -> Account:
        """Fetch the stored account and merge the incoming access keys."""
        return self.merge_account(account, self.stored_account(account.id))
