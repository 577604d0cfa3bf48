"""Elasticsearch document store: REST over ``requests``"""
from typing import Any, Dict, Optional

import requests

from provision.errors import BackingStoreError
from provision.schemas.store import PersistResult, SearchResults
from provision.store.base import DocumentStore, FetchResult
from provision.store.mappings import IndexTemplate, index_templates
from provision.utils.logger import logger


class ElasticDocumentStore(DocumentStore):
    """Document store backed by an Elasticsearch cluster.

    Documents live at ``{prefix}{kind}/_doc/{id}``. A 404 on a document get
    is "not found"; every other non-2xx answer, and any transport failure,
    raises :class:`BackingStoreError`. Nothing is retried here.
    """

    def __init__(
        self,
        server: str,
        prefix: str,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(prefix)
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    # ---------------------------------------------------------------------------
    # Internal request handling
    # ---------------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send a request to the cluster, converting transport errors."""
        url = f"{self.server}/{path.lstrip('/')}"
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error(f"Elasticsearch request failed: {method} {path}", extra={"action": "es_request"})
            raise BackingStoreError(f"error communicating with document store: {exc}") from exc

    def _doc_path(self, kind: str, doc_id: str) -> str:
        return f"{self.index(kind)}/_doc/{requests.utils.quote(doc_id, safe='')}"

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as exc:
            raise BackingStoreError("document store returned a non-JSON response") from exc

    # ---------------------------------------------------------------------------
    # DocumentStore
    # ---------------------------------------------------------------------------

    def fetch(self, kind: str, doc_id: str) -> FetchResult:
        response = self._request("GET", self._doc_path(kind, doc_id))

        if response.status_code == 404:
            return FetchResult(found=False, document=None)

        if response.status_code >= 300:
            logger.error(
                f"Bad response from Elasticsearch looking up {kind} {doc_id}",
                extra={"action": "fetch", "status": response.status_code},
            )
            raise BackingStoreError(f"bad response from document store while looking up {kind}")

        body = self._json(response)
        if not body.get("found", True):
            return FetchResult(found=False, document=None)

        return FetchResult(found=True, document=body.get("_source", {}))

    def persist(self, kind: str, doc_id: str, document: Dict[str, Any]) -> PersistResult:
        response = self._request("PUT", self._doc_path(kind, doc_id), json=document)

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(
                f"Elasticsearch returned {response.status_code} writing {kind} {doc_id}",
                extra={"action": "persist", "status": response.status_code},
            )
            raise BackingStoreError(f"document store returned {response.status_code} writing {kind}")

        body = self._json(response)
        return PersistResult(
            index=body.get("_index", self.index(kind)),
            id=body.get("_id", doc_id),
            result=body.get("result", "updated"),
            version=body.get("_version"),
        )

    def search(self, kind: str, body: Dict[str, Any]) -> SearchResults:
        response = self._request("POST", f"{self.index(kind)}/_search", json=body)

        # The index only exists once a first document was written
        if response.status_code == 404:
            return SearchResults(total=0, hits=[])

        if response.status_code >= 300:
            raise BackingStoreError(f"document store returned {response.status_code} searching {kind}")

        hits = self._json(response).get("hits", {})
        total = hits.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)

        return SearchResults(
            total=total,
            hits=[hit.get("_source", {}) for hit in hits.get("hits", [])],
        )

    def ping(self) -> bool:
        try:
            return self._request("GET", "/").status_code == 200
        except BackingStoreError:
            return False

    # ---------------------------------------------------------------------------
    # Index templates
    # ---------------------------------------------------------------------------

    def put_template(self, mapping: IndexTemplate) -> None:
        """Install a legacy index template."""
        logger.info(f"Sending template {mapping.name}", extra={"action": "put_template"})

        response = self._request("PUT", f"_template/{mapping.name}", json=mapping.template)
        if response.status_code != 200:
            raise BackingStoreError(
                f"error setting up {mapping.name} template, got code {response.status_code}"
            )

    def ensure_templates(self) -> None:
        for mapping in index_templates(self.prefix):
            self.put_template(mapping)
