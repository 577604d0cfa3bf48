"""Provisioning service: composes the engine with the document store.

Writes go through read-merge-write: the stored document is fetched once,
secret fields (and for parent-scoped writes, the parent) are resolved
against it, and the result replaces the stored document. Every document
leaving this service has its secrets redacted.
"""
from typing import Any, Dict, List, Optional, Tuple

from provision.config import EngineConfig
from provision.errors import NotFoundError
from provision.schemas.account import Account, KeyCheck
from provision.schemas.asset import Asset, AssetAssoc
from provision.schemas.store import PersistResult, SearchResults
from provision.schemas.user import Auth, User
from provision.store.base import IDX_ACCOUNT, IDX_ASSET, IDX_USER, DocumentStore, term_query
from provision.utils.credentials import CredentialMergePolicy
from provision.utils.hierarchy import AccountHierarchyGuard
from provision.utils.logger import logger
from provision.utils.secret_codec import SecretCodec


class Provisioner:
    """User, account and asset operations over a document store."""

    def __init__(self, config: EngineConfig, store: DocumentStore):
        self.config = config
        self.store = store
        self.codec = SecretCodec(config)
        self.credentials = CredentialMergePolicy(self.codec, store)
        self.hierarchy = AccountHierarchyGuard(store)

    def _fetch(self, kind: str, doc_id: str) -> Dict[str, Any]:
        result = self.store.fetch(kind, doc_id)
        if not result.found:
            raise NotFoundError(f"{kind.capitalize()} {doc_id} not found.")
        return result.document

    # ---------------------------------------------------------------------------
    # Users
    # ---------------------------------------------------------------------------

    def upsert_user(self, user: User) -> PersistResult:
        logger.info(f"Upsert user record {user.id}", extra={"user_id": user.id, "action": "upsert_user"})

        merged = self.credentials.resolve_user(user)
        return self.store.persist(IDX_USER, merged.id, merged.model_dump())

    def get_user(self, user_id: str) -> User:
        return self.codec.redact_user(User.model_validate(self._fetch(IDX_USER, user_id)))

    def search_users(self, body: Dict[str, Any]) -> SearchResults:
        results = self.store.search(IDX_USER, body)
        hits = [self.codec.redact_user(User.model_validate(hit)).model_dump() for hit in results.hits]
        return SearchResults(total=results.total, hits=hits)

    def auth_user(self, auth: Auth) -> Tuple[Optional[User], bool]:
        """Verify a user's password.

        Returns:
            ``(None, False)`` for an unknown user, otherwise the redacted
            user and whether the password matched.
        """
        stored = self.credentials.stored_user(auth.id)
        if stored is None:
            logger.warning(f"User {auth.id} not found", extra={"user_id": auth.id, "action": "auth_user"})
            return None, False

        ok = self.codec.verify(stored.password, auth.password)
        return self.codec.redact_user(stored), ok

    # ---------------------------------------------------------------------------
    # Accounts
    # ---------------------------------------------------------------------------

    def upsert_account(self, account: Account) -> PersistResult:
        """Unscoped upsert; ``parent`` is taken from the request as is."""
        logger.info(f"Upsert account record {account.id}", extra={"account_id": account.id, "action": "upsert_account"})

        merged = self.credentials.resolve_account(account)
        return self.store.persist(IDX_ACCOUNT, merged.id, merged.model_dump())

    def get_account(self, account_id: str) -> Account:
        return self.codec.redact_account(Account.model_validate(self._fetch(IDX_ACCOUNT, account_id)))

    def search_accounts(self, body: Dict[str, Any]) -> SearchResults:
        results = self.store.search(IDX_ACCOUNT, body)
        hits = [self.codec.redact_account(Account.model_validate(hit)).model_dump() for hit in results.hits]
        return SearchResults(total=results.total, hits=hits)

    def check_key(self, account_id: str, key_check: KeyCheck) -> bool:
        """True if the account is active and holds an active key matching ``key_check``."""
        account = self.credentials.stored_account(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found.")

        access_key = account.find_key(key_check.name)
        if not account.active or access_key is None or not access_key.active:
            return False
        return self.codec.verify(access_key.key, key_check.key)

    # ---------------------------------------------------------------------------
    # Assets
    # ---------------------------------------------------------------------------

    def upsert_asset(self, asset: Asset) -> PersistResult:
        logger.info(f"Upsert asset record {asset.id}", extra={"asset_id": asset.id, "action": "upsert_asset"})
        return self.store.persist(IDX_ASSET, asset.id, asset.model_dump())

    def get_asset(self, asset_id: str) -> Asset:
        return Asset.model_validate(self._fetch(IDX_ASSET, asset_id))

    def search_assets(self, body: Dict[str, Any]) -> SearchResults:
        return self.store.search(IDX_ASSET, body)

    # ---------------------------------------------------------------------------
    # Parent-scoped (admin) operations
    # ---------------------------------------------------------------------------

    def get_child_account(self, parent_id: str, account_id: str) -> Account:
        account = Account.model_validate(self._fetch(IDX_ACCOUNT, account_id))
        return self.codec.redact_account(self.hierarchy.check_child(parent_id, account))

    def upsert_child_account(self, parent_id: str, account: Account) -> PersistResult:
        """Upsert ``account`` as a child of ``parent_id``."""
        logger.info(
            f"Upsert child account {account.id} of {parent_id}",
            extra={"account_id": account.id, "parent_account": parent_id, "action": "upsert_child_account"},
        )

        existing = self.credentials.stored_account(account.id)
        scoped = self.hierarchy.assign_parent(parent_id, account, existing)
        merged = self.credentials.merge_account(scoped, existing)
        return self.store.persist(IDX_ACCOUNT, merged.id, merged.model_dump())

    def list_children(self, parent_id: str) -> List[Account]:
        results = self.store.search(IDX_ACCOUNT, term_query("parent", parent_id))
        return [self.codec.redact_account(Account.model_validate(hit)) for hit in results.hits]

    def assets_for_account(self, parent_id: str, account_id: str) -> List[Asset]:
        """Assets routed to ``account_id``, which must be the parent or a child."""
        self.hierarchy.check_related(parent_id, account_id)
        results = self.store.search(IDX_ASSET, term_query("routes.account_id", account_id))
        return [Asset.model_validate(hit) for hit in results.hits]

    def reassociate_asset(self, parent_id: str, assoc: AssetAssoc) -> Tuple[Asset, int]:
        asset = self.get_asset(assoc.asset_id)
        updated, moved = self.hierarchy.reassociate(
            parent_id, asset, assoc.from_account_id, assoc.to_account_id,
        )
        self.store.persist(IDX_ASSET, updated.id, updated.model_dump())

        logger.info(
            f"Re-associated {moved} route(s) of asset {asset.id}",
            extra={"asset_id": asset.id, "parent_account": parent_id, "action": "asset_assoc"},
        )
        return updated, moved
