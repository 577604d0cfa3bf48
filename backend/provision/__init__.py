"""Provision: accounts, users and assets with role/account scoped access"""

__version__ = "0.1.0"
