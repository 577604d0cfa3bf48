"""Document store result schemas"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PersistResult(BaseModel):
    """Outcome of a full-document write"""

    index: str
    id: str
    result: str = "updated"  # created | updated
    version: Optional[int] = None


class SearchQuery(BaseModel):
    """Search body for the ``/search*`` endpoints (document store query DSL)"""

    query: Dict[str, Any] = Field(default_factory=lambda: {"match_all": {}})
    size: int = Field(100, ge=0, le=10000)
    from_: int = Field(0, ge=0, alias="from")

    class Config:
        populate_by_name = True


class SearchResults(BaseModel):
    total: int
    hits: List[Dict[str, Any]]
