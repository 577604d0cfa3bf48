"""Parent-scoped account administration.

Routes under ``/adm/{parent_account}`` act on behalf of ``parent_account``
and only reach that account and its direct children. They carry no
authentication of their own: call them internally, or through a proxy that
has already checked admin access to ``parent_account`` (``/userHasAdminAccess``).
"""
from typing import List

from fastapi import APIRouter, Depends

from provision.api.deps import get_provisioner
from provision.errors import ProvisionError
from provision.middleware.monitoring import record_credential_merge
from provision.provisioner import Provisioner
from provision.schemas.account import Account
from provision.schemas.asset import Asset, AssetAssoc, AssetAssocResult
from provision.schemas.store import PersistResult
from provision.utils.logger import logger

router = APIRouter(prefix="/adm/{parent_account}", tags=["adm"])


@router.get("/account/{account_id}", response_model=Account)
def get_adm_account(
    parent_account: str,
    account_id: str,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Get an account; it must be ``parent_account`` or one of its children"""
    return provisioner.get_child_account(parent_account, account_id)


@router.post("/account", response_model=PersistResult)
def upsert_adm_child_account(
    parent_account: str,
    account: Account,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """
    Insert or replace a child account of ``parent_account``

    A new account becomes a child of ``parent_account``; an existing account
    must already be one.
    """
    try:
        result = provisioner.upsert_child_account(parent_account, account)
    except ProvisionError as exc:
        record_credential_merge("account", exc.code)
        logger.error(
            f"Child upsert failure: {exc.message}",
            extra={"account_id": account.id, "parent_account": parent_account, "action": "upsert_child_account"},
        )
        raise

    record_credential_merge("account", "ok")
    return result


@router.get("/children", response_model=List[Account])
def get_adm_child_accounts(
    parent_account: str,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """List the direct children of ``parent_account``"""
    return provisioner.list_children(parent_account)


@router.get("/assets/{account_id}", response_model=List[Asset])
def get_adm_assets(
    parent_account: str,
    account_id: str,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Assets routed to ``account_id`` (the parent or one of its children)"""
    return provisioner.assets_for_account(parent_account, account_id)


@router.post("/assetAssoc", response_model=AssetAssocResult)
def asset_adm_assoc(
    parent_account: str,
    assoc: AssetAssoc,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """
    Move an asset's routes from one account to another

    Both accounts must be ``parent_account`` or one of its children, and the
    asset must have at least one route to ``from_account_id``.
    """
    asset, moved = provisioner.reassociate_asset(parent_account, assoc)
    return AssetAssocResult(asset=asset, routes_updated=moved)
