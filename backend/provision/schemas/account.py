"""Account schemas"""
from typing import List, Optional

from pydantic import BaseModel, Field


class AccessKey(BaseModel):
    """A named access key; ``name`` identifies it within its account"""

    name: str = Field(..., min_length=1)
    description: str = ""
    key: str = ""
    active: bool = False


class Account(BaseModel):
    """An account document. An empty ``parent`` means top-level."""

    id: str = Field(..., min_length=1, description="Account id")
    parent: str = ""
    description: str = ""
    display_name: str = ""
    active: bool = False
    modules: List[str] = Field(default_factory=list)
    org_id: int = 0
    access_keys: List[AccessKey] = Field(default_factory=list)

    def find_key(self, name: str) -> Optional[AccessKey]:
        """Return the first access key named ``name``"""
        for access_key in self.access_keys:
            if access_key.name == name:
                return access_key
        return None


class KeyCheck(BaseModel):
    """Access key presented to ``/keyCheck/{id}``"""

    name: str
    key: str


class KeyCheckResult(BaseModel):
    account_id: str
    name: str
    valid: bool
