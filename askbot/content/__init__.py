# Content layer: SQLite store plus the page-data and site-context collaborators.

from .store import ContentStore

__all__ = ["ContentStore"]
