"""SQL document store: whole JSON documents in a single SQLAlchemy table.

Used for local development and the test-suite. Writes replace the stored
body, mirroring the full-document semantics of the Elasticsearch store.
Search understands a small part of the query DSL:

    {"match_all": {}}
    {"term": {"parent": "acct1"}}            also {"term": {"f": {"value": v}}}
    {"terms": {"id": ["a", "b"]}}
    {"bool": {"must": [...], "filter": [...], "should": [...], "must_not": [...]}}

Any other form raises InvalidQueryError before documents are read.

Dotted fields walk nested objects and lists, so ``routes.account_id``
matches when any route carries the value.
"""
import copy
from typing import Any, Callable, Dict, Iterator, List, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from provision.errors import BackingStoreError, InvalidQueryError
from provision.models.document import Document
from provision.schemas.store import PersistResult, SearchResults
from provision.store.base import DocumentStore, FetchResult
from provision.utils.logger import logger


class SqlDocumentStore(DocumentStore):
    """Document store backed by a relational database."""

    def __init__(self, session_factory: sessionmaker, prefix: str):
        super().__init__(prefix)
        self.session_factory = session_factory

    def fetch(self, kind: str, doc_id: str) -> FetchResult:
        try:
            with self.session_factory() as db:
                document = db.query(Document).filter(
                    Document.index_name == self.index(kind),
                    Document.doc_id == doc_id,
                ).first()
        except SQLAlchemyError as exc:
            logger.error(f"Database error looking up {kind} {doc_id}", extra={"action": "fetch"})
            raise BackingStoreError(f"bad response from document store while looking up {kind}") from exc

        if document is None:
            return FetchResult(found=False, document=None)
        return FetchResult(found=True, document=copy.deepcopy(document.body))

    def persist(self, kind: str, doc_id: str, document: Dict[str, Any]) -> PersistResult:
        index_name = self.index(kind)
        try:
            with self.session_factory() as db:
                stored = db.query(Document).filter(
                    Document.index_name == index_name,
                    Document.doc_id == doc_id,
                ).first()

                if stored:
                    stored.body = copy.deepcopy(document)
                    stored.version = stored.version + 1
                    result = "updated"
                else:
                    stored = Document(index_name=index_name, doc_id=doc_id, body=copy.deepcopy(document), version=1)
                    db.add(stored)
                    result = "created"

                db.commit()
                version = stored.version
        except SQLAlchemyError as exc:
            logger.error(f"Database error writing {kind} {doc_id}", extra={"action": "persist"})
            raise BackingStoreError(f"document store failed writing {kind}") from exc

        return PersistResult(index=index_name, id=doc_id, result=result, version=version)

    def search(self, kind: str, body: Dict[str, Any]) -> SearchResults:
        predicate = _compile(body.get("query") or {"match_all": {}})
        size = body.get("size", 10)
        start = body.get("from", 0)

        try:
            with self.session_factory() as db:
                documents = db.query(Document).filter(
                    Document.index_name == self.index(kind),
                ).order_by(Document.doc_id).all()
                bodies = [copy.deepcopy(document.body) for document in documents]
        except SQLAlchemyError as exc:
            raise BackingStoreError(f"document store failed searching {kind}") from exc

        matched = [doc for doc in bodies if predicate(doc)]
        return SearchResults(total=len(matched), hits=matched[start:start + size])

    def ping(self) -> bool:
        try:
            with self.session_factory() as db:
                db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False


# ---------------------------------------------------------------------------
# Query evaluation
# ---------------------------------------------------------------------------

Predicate = Callable[[Dict[str, Any]], bool]

_BOOL_OCCURS = ("must", "filter", "should", "must_not")


def _single_field(clause: str, spec: Any) -> Tuple[str, Any]:
    if not isinstance(spec, dict) or len(spec) != 1:
        raise InvalidQueryError(f"{clause} query takes exactly one field")
    ((field, expected),) = spec.items()
    return field, expected


def _bool_clauses(occur: str, part: Any) -> List[Dict[str, Any]]:
    clauses = part if isinstance(part, list) else [part]
    if not all(isinstance(clause, dict) for clause in clauses):
        raise InvalidQueryError(f"bool {occur} clauses must be query objects")
    return clauses


def _compile(query: Dict[str, Any]) -> Predicate:
    """Validate ``query`` and turn it into a predicate over documents.

    Raises:
        InvalidQueryError: the query uses a form this store cannot run.
    """
    if not isinstance(query, dict):
        raise InvalidQueryError("query must be an object")
    if not query:
        return lambda doc: True
    if len(query) != 1:
        raise InvalidQueryError(f"query takes exactly one clause, got {sorted(query)}")

    ((clause, spec),) = query.items()

    if clause == "match_all":
        return lambda doc: True

    if clause == "term":
        field, expected = _single_field("term", spec)
        if isinstance(expected, dict):
            if set(expected) != {"value"}:
                raise InvalidQueryError("term query object takes only 'value'")
            expected = expected["value"]
        return lambda doc: any(value == expected for value in _values(doc, field))

    if clause == "terms":
        field, expected = _single_field("terms", spec)
        if not isinstance(expected, list):
            raise InvalidQueryError("terms query takes a list of values")
        return lambda doc: any(value in expected for value in _values(doc, field))

    if clause == "bool":
        if not isinstance(spec, dict):
            raise InvalidQueryError("bool query must be an object")
        unknown = set(spec) - set(_BOOL_OCCURS)
        if unknown:
            raise InvalidQueryError(f"unsupported bool clauses: {sorted(unknown)}")

        compiled = {
            occur: [_compile(sub) for sub in _bool_clauses(occur, spec.get(occur, []))]
            for occur in _BOOL_OCCURS
        }
        required = compiled["must"] + compiled["filter"]
        # should is optional once must or filter is present
        should_needed = bool(compiled["should"]) and not required

        def matches(doc: Dict[str, Any]) -> bool:
            if not all(predicate(doc) for predicate in required):
                return False
            if any(predicate(doc) for predicate in compiled["must_not"]):
                return False
            if should_needed:
                return any(predicate(doc) for predicate in compiled["should"])
            return True

        return matches

    raise InvalidQueryError(f"unsupported query: {clause}")


def _values(node: Any, path: str) -> Iterator[Any]:
    """Yield every leaf value reachable through a dotted ``path``"""
    head, _, rest = path.partition(".")

    if isinstance(node, list):
        for item in node:
            yield from _values(item, path)
        return

    if not isinstance(node, dict) or head not in node:
        return

    value = node[head]
    if rest:
        yield from _values(value, rest)
    elif isinstance(value, list):
        yield from value
    else:
        yield value
