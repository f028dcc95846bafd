"""Catalog adapter: reading and storing issue records."""

from .loader import CatalogError, issue_from_mapping, load_catalog, parse_catalog
from .store import IssueStore

__all__ = [
    "CatalogError",
    "IssueStore",
    "issue_from_mapping",
    "load_catalog",
    "parse_catalog",
]
