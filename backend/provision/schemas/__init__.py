"""Pydantic schemas for request/response validation"""
from provision.schemas.access import AccessCheck, AccessCheckResult
from provision.schemas.account import AccessKey, Account, KeyCheck, KeyCheckResult
from provision.schemas.asset import Asset, AssetAssoc, AssetAssocResult, Route
from provision.schemas.store import PersistResult, SearchQuery, SearchResults
from provision.schemas.user import Auth, User, UserTokenResult

__all__ = [
    "AccessCheck",
    "AccessCheckResult",
    "AccessKey",
    "Account",
    "KeyCheck",
    "KeyCheckResult",
    "Asset",
    "AssetAssoc",
    "AssetAssocResult",
    "Route",
    "PersistResult",
    "SearchQuery",
    "SearchResults",
    "Auth",
    "User",
    "UserTokenResult",
]
