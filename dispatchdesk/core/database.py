import json
import os
import sqlite3
import uuid
import logging

from .config import get_config_value
from .errors import StoreError

logger = logging.getLogger(__name__)


class Database:

    @staticmethod
    def connect(path):
        return sqlite3.connect(path)


class DocumentStore:
    """
    Data-access contract the order desk consumes.

    Records are plain dicts keyed by an opaque string ``id``. Every method
    raises StoreError on transport or storage failure.
    """

    def list_all(self, collection):
        raise NotImplementedError

    def update(self, collection, doc_id, fields):
        raise NotImplementedError

    def delete(self, collection, doc_id):
        raise NotImplementedError


class SQLiteDocumentStore(DocumentStore):
    """
    Document store backed by a single SQLite table.

    Each row holds (collection, id, data) where data is the JSON-encoded
    record without its id.
    """

    def __init__(self, path=None):
        self._path = path

    @property
    def path(self):
        return self._path or get_config_value('ORDERS_DB', 'orders.db')

    def init_store(self):
        """Create the documents table if it doesn't exist"""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        try:
            with Database.connect(self.path) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS documents (
                        collection TEXT NOT NULL,
                        id TEXT NOT NULL,
                        data TEXT NOT NULL DEFAULT '{}',
                        PRIMARY KEY (collection, id)
                    )
                """)
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Could not initialise document store: {e}") from e

    def list_all(self, collection):
        """Return every record in a collection in insertion order"""
        self.init_store()
        try:
            with Database.connect(self.path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT id, data FROM documents WHERE collection = ? ORDER BY rowid",
                    (collection,)
                )
                return [_row_to_doc(row) for row in cursor.fetchall()]
        except (sqlite3.Error, ValueError) as e:
            raise StoreError(f"Failed to list {collection}: {e}") from e

    def get(self, collection, doc_id):
        """Return one record or None"""
        self.init_store()
        try:
            with Database.connect(self.path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                    (collection, str(doc_id))
                )
                row = cursor.fetchone()
                return _row_to_doc(row) if row else None
        except (sqlite3.Error, ValueError) as e:
            raise StoreError(f"Failed to read {collection}/{doc_id}: {e}") from e

    def insert(self, collection, fields, doc_id=None):
        """Insert a record and return its id (generated when not given)"""
        self.init_store()
        doc_id = str(doc_id) if doc_id else uuid.uuid4().hex
        data = {k: v for k, v in fields.items() if k != 'id'}
        try:
            with Database.connect(self.path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "INSERT INTO documents (collection, id, data) VALUES (?, ?, ?)",
                    (collection, doc_id, json.dumps(data))
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to insert into {collection}: {e}") from e
        return doc_id

    def update(self, collection, doc_id, fields):
        """Merge fields into an existing record"""
        self.init_store()
        try:
            with Database.connect(self.path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT data FROM documents WHERE collection = ? AND id = ?",
                    (collection, str(doc_id))
                )
                row = cursor.fetchone()
                if not row:
                    raise StoreError(f"No document {collection}/{doc_id}")

                data = json.loads(row[0])
                data.update({k: v for k, v in fields.items() if k != 'id'})
                cursor.execute(
                    "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
                    (json.dumps(data), collection, str(doc_id))
                )
                conn.commit()
        except (sqlite3.Error, ValueError) as e:
            raise StoreError(f"Failed to update {collection}/{doc_id}: {e}") from e

    def delete(self, collection, doc_id):
        """Remove a record"""
        self.init_store()
        try:
            with Database.connect(self.path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "DELETE FROM documents WHERE collection = ? AND id = ?",
                    (collection, str(doc_id))
                )
                deleted = cursor.rowcount
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete {collection}/{doc_id}: {e}") from e

        if deleted == 0:
            raise StoreError(f"No document {collection}/{doc_id}")


def _row_to_doc(row):
    doc_id, data = row
    doc = json.loads(data) if data else {}
    doc['id'] = doc_id
    return doc
