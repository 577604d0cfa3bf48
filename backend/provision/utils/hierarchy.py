"""Account hierarchy guard for parent-scoped operations.

A parent account ``P`` may act on itself and on its direct children (accounts
whose stored ``parent`` is ``P``). The first parent-scoped write of an
account establishes ownership; after that the parent never changes through
this path.
"""
from typing import List, Optional, Tuple

from provision.errors import AccountAccessError, HierarchyViolationError, NoAssociationError
from provision.schemas.account import Account
from provision.schemas.asset import Asset, Route
from provision.store.base import IDX_ACCOUNT, DocumentStore


def is_self_or_child(parent_id: str, account_id: str, account: Optional[Account]) -> bool:
    """True if ``account_id`` is ``parent_id`` itself or one of its children."""
    if account_id == parent_id:
        return True
    return account is not None and account.parent == parent_id


class AccountHierarchyGuard:
    """Validates parent/child relationships before a store operation."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _stored_account(self, account_id: str) -> Optional[Account]:
        result = self.store.fetch(IDX_ACCOUNT, account_id)
        return Account.model_validate(result.document) if result.found else None

    def assign_parent(self, parent_id: str, account: Account, existing: Optional[Account]) -> Account:
        """Return ``account`` scoped to ``parent_id`` for a parent-scoped upsert.

        Raises:
            HierarchyViolationError: ``existing`` belongs to another parent
                or is itself top-level.
        """
        if existing is not None and existing.parent != parent_id:
            raise HierarchyViolationError(
                f"account {account.id} is not a child of {parent_id}"
            )
        return account.model_copy(update={"parent": parent_id})

    def check_child(self, parent_id: str, account: Account) -> Account:
        """Allow reading ``account`` only as ``parent_id`` itself or its child."""
        if not is_self_or_child(parent_id, account.id, account):
            raise AccountAccessError(f"account {account.id} is not {parent_id} or a child of {parent_id}")
        return account

    def check_related(self, parent_id: str, account_id: str) -> None:
        """Fetch ``account_id`` and require it to be ``parent_id`` or a child.

        An account that does not exist cannot be shown to be a child and is
        refused.
        """
        if account_id == parent_id:
            return
        account = self._stored_account(account_id)
        if not is_self_or_child(parent_id, account_id, account):
            raise AccountAccessError(f"account {account_id} is not {parent_id} or a child of {parent_id}")

    def reassociate(self, parent_id: str, asset: Asset, from_id: str, to_id: str) -> Tuple[Asset, int]:
        """Rewrite every route of ``asset`` owned by ``from_id`` to ``to_id``.

        Both accounts must be ``parent_id`` itself or one of its direct
        children.

        Returns:
            The rewritten asset and the number of routes moved.

        Raises:
            AccountAccessError: either account is outside the hierarchy.
            NoAssociationError: no route of the asset belongs to ``from_id``.
        """
        self.check_related(parent_id, from_id)
        self.check_related(parent_id, to_id)

        routes: List[Route] = []
        moved = 0
        for route in asset.routes:
            if route.account_id == from_id:
                routes.append(route.model_copy(update={"account_id": to_id}))
                moved += 1
            else:
                routes.append(route)

        if moved == 0:
            raise NoAssociationError(f"asset {asset.id} has no routes for account {from_id}")

        return asset.model_copy(update={"routes": routes}), moved
