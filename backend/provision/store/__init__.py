"""Document store backends"""
from provision.config import Settings
from provision.store.base import IDX_ACCOUNT, IDX_ASSET, IDX_USER, DocumentStore, FetchResult, term_query


def create_store(settings: Settings) -> DocumentStore:
    """Build the configured document store backend

    Index names come from the same ``EngineConfig`` the engine components
    are built from.
    """
    prefix = settings.engine_config().index_prefix

    if settings.STORE_BACKEND == "sql":
        from provision.database import Base, create_db_engine, create_session_factory
        from provision.store.sql import SqlDocumentStore

        engine = create_db_engine(settings.DATABASE_URL)
        Base.metadata.create_all(bind=engine)
        return SqlDocumentStore(create_session_factory(engine), prefix=prefix)

    if settings.STORE_BACKEND == "elastic":
        from provision.store.elastic import ElasticDocumentStore

        return ElasticDocumentStore(settings.ELASTIC_SERVER, prefix=prefix, timeout=settings.ELASTIC_TIMEOUT)

    raise ValueError(f"unknown STORE_BACKEND: {settings.STORE_BACKEND}")


__all__ = [
    "IDX_ACCOUNT",
    "IDX_ASSET",
    "IDX_USER",
    "DocumentStore",
    "FetchResult",
    "create_store",
    "term_query",
]
