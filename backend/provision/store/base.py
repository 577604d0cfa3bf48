"""Document store contract.

The store keeps whole JSON documents per kind (``user``, ``account``,
``asset``) and treats them as immutable: every write replaces the entire
document. Implementations must tell "not found" apart from a failed lookup;
the latter is raised as :class:`~provision.errors.BackingStoreError`.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, NamedTuple, Optional

from provision.schemas.store import PersistResult, SearchResults

IDX_USER = "user"
IDX_ACCOUNT = "account"
IDX_ASSET = "asset"


class FetchResult(NamedTuple):
    found: bool
    document: Optional[Dict[str, Any]]


class DocumentStore(ABC):
    """Full-document get/put/search against one index per kind."""

    def __init__(self, prefix: str):
        self.prefix = prefix

    def index(self, kind: str) -> str:
        """Index name for ``kind``, e.g. ``system_account``"""
        return f"{self.prefix}{kind}"

    @abstractmethod
    def fetch(self, kind: str, doc_id: str) -> FetchResult:
        """Fetch a stored document, unredacted."""

    @abstractmethod
    def persist(self, kind: str, doc_id: str, document: Dict[str, Any]) -> PersistResult:
        """Replace the stored document for ``doc_id`` with ``document``."""

    @abstractmethod
    def search(self, kind: str, body: Dict[str, Any]) -> SearchResults:
        """Run a query DSL body; hits are the stored ``_source`` documents."""

    @abstractmethod
    def ping(self) -> bool:
        """True if the backing store answers."""

    def ensure_templates(self) -> None:
        """Install index templates, where the backend has any."""


def term_query(field: str, value: Any, size: int = 1000) -> Dict[str, Any]:
    """Search body matching documents whose ``field`` equals ``value``"""
    return {"query": {"term": {field: value}}, "size": size}
