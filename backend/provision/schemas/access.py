"""Access check schemas"""
from typing import List

from pydantic import BaseModel, Field


class AccessCheck(BaseModel):
    """Accounts and sections a caller asserts access to. Never persisted."""

    accounts: List[str] = Field(default_factory=list)
    sections: List[str] = Field(default_factory=list)


class AccessCheckResult(BaseModel):
    access_check: AccessCheck
    status: bool
    message: str
