"""semindex storage layer."""

from semindex.db.connection import Database
from semindex.db.migrations import MIGRATIONS, run_migrations
from semindex.db.models import Document, DocumentRecord
from semindex.db.store import VectorStore

__all__ = [
    "Database",
    "Document",
    "DocumentRecord",
    "MIGRATIONS",
    "VectorStore",
    "run_migrations",
]
