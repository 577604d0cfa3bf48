"""User schemas"""
from typing import List

from pydantic import BaseModel, Field


class User(BaseModel):
    """A user document as stored in the user index.

    ``password`` holds a bcrypt digest once merged; on the way in it carries
    the plaintext, an empty string or the redaction sentinel.
    """

    id: str = Field(..., min_length=1, description="User id")
    description: str = ""
    display_name: str = ""
    active: bool = False
    sysop: bool = Field(False, description="Super-admin; bypasses every scoped check")
    password: str = ""
    sections: List[str] = Field(default_factory=list)
    sections_all: bool = False
    accounts: List[str] = Field(default_factory=list, description="Member-level accounts")
    admin_accounts: List[str] = Field(default_factory=list, description="Admin-level accounts")


class Auth(BaseModel):
    """Credentials posted to ``/authUser``"""

    id: str
    password: str


class UserTokenResult(BaseModel):
    user: User
    token: str
