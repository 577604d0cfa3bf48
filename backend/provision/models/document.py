"""Document model: one stored JSON document per (index_name, doc_id)"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint

from provision.database import Base


class Document(Base):
    """A whole document; writes replace ``body`` and bump ``version``."""

    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("index_name", "doc_id", name="uq_documents_index_doc_id"),)

    id = Column(Integer, primary_key=True)
    index_name = Column(String(255), nullable=False, index=True)   # e.g. system_account
    doc_id = Column(String(255), nullable=False)
    body = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
