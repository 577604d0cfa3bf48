"""Asset schemas"""
from typing import List

from pydantic import BaseModel, Field


class Route(BaseModel):
    """Routes an asset's data to an account's model"""

    account_id: str
    model_id: str = ""
    type: str = ""


class Asset(BaseModel):
    id: str = Field(..., min_length=1, description="Asset id")
    description: str = ""
    display_name: str = ""
    asset_class: str = ""
    asset_cfg: str = ""
    active: bool = False
    routes: List[Route] = Field(default_factory=list)


class AssetAssoc(BaseModel):
    """Move an asset's routes from one account to another"""

    asset_id: str = Field(..., min_length=1)
    from_account_id: str = Field(..., min_length=1)
    to_account_id: str = Field(..., min_length=1)


class AssetAssocResult(BaseModel):
    asset: Asset
    routes_updated: int
