"""Account endpoints"""
from fastapi import APIRouter, Depends, Request

from provision.api.deps import get_provisioner
from provision.errors import ProvisionError
from provision.middleware.monitoring import record_credential_merge
from provision.middleware.rate_limit import get_rate_limit, limiter
from provision.provisioner import Provisioner
from provision.schemas.account import Account, KeyCheck, KeyCheckResult
from provision.schemas.store import PersistResult, SearchQuery, SearchResults
from provision.utils.logger import logger

router = APIRouter(tags=["accounts"])


@router.post("/account", response_model=PersistResult)
def upsert_account(
    account: Account,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """
    Insert or replace an account

    Access keys are matched to stored keys by name; an empty or ``REDACTED``
    key keeps the stored key.
    """
    try:
        result = provisioner.upsert_account(account)
    except ProvisionError as exc:
        record_credential_merge("account", exc.code)
        logger.error(f"Upsert failure: {exc.message}", extra={"account_id": account.id, "action": "upsert_account"})
        raise

    record_credential_merge("account", "ok")
    return result


@router.get("/account/{account_id}", response_model=Account)
def get_account(
    account_id: str,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Get an account by id (access keys redacted)"""
    return provisioner.get_account(account_id)


@router.post("/searchAccounts", response_model=SearchResults)
def search_accounts(
    search: SearchQuery,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Search accounts (access keys redacted)"""
    return provisioner.search_accounts(search.model_dump(by_alias=True))


@router.post("/keyCheck/{account_id}", response_model=KeyCheckResult)
@limiter.limit(get_rate_limit("key_check"))
def check_key(
    request: Request,
    account_id: str,
    key_check: KeyCheck,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Check an account for an active access key"""
    valid = provisioner.check_key(account_id, key_check)
    return KeyCheckResult(account_id=account_id, name=key_check.name, valid=valid)
