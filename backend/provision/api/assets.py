"""Asset endpoints"""
from fastapi import APIRouter, Depends

from provision.api.deps import get_provisioner
from provision.provisioner import Provisioner
from provision.schemas.asset import Asset
from provision.schemas.store import PersistResult, SearchQuery, SearchResults

router = APIRouter(tags=["assets"])


@router.post("/asset", response_model=PersistResult)
def upsert_asset(
    asset: Asset,
    provisioner: Provisioner = Depends(get_provisioner),
):
    """Insert or replace an asset"""
    return provisioner.upsert_asset(asset)


@router.get("/asset/{asset_id}", response_model=Asset)
def get_asset(
    asset_id: str,
    provisioner: Provisioner = Depends(get_provisioner),
):
    return provisioner.get_asset(asset_id)


@router.post("/searchAssets", response_model=SearchResults)
def search_assets(
    search: SearchQuery,
    provisioner: Provisioner = Depends(get_provisioner),
):
    return provisioner.search_assets(search.model_dump(by_alias=True))
