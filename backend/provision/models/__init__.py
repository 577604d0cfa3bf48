"""Database models"""
from provision.models.document import Document

__all__ = ["Document"]
