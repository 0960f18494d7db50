"""
Shared fixtures for the Dispatch Desk test suite.

Run with: pytest tests/ -v
Install test deps with: pip install -e ".[dev]"
"""

import copy
import os
import shutil
import tempfile

import pytest
from flask import Flask

from dispatchdesk import DispatchDesk
from dispatchdesk.core.config import Config
from dispatchdesk.core.database import DocumentStore, SQLiteDocumentStore
from dispatchdesk.core.errors import StoreError


ORDERS = [
    {
        'id': 'ord-1',
        'customerName': 'Ali Ahmed',
        'customerEmail': 'ali@example.com',
        'userId': 'cust-1',
        'originCity': 'Lahore',
        'destinationCity': 'Karachi',
        'packageType': 'small',
        'weight': '2',
        'price': 500,
        'status': 'pending',
        'createdAt': '2024-01-20T10:30:00.000Z',
    },
    {
        'id': 'ord-2',
        'customerName': 'Fatima Khan',
        'customerEmail': 'fatima@example.com',
        'userId': 'cust-2',
        'originCity': 'Islamabad',
        'destinationCity': 'Lahore',
        'packageType': 'large',
        'weight': '12',
        'price': '1200.50',
        'status': 'delivered',
        'riderId': 'rider-1',
        'riderName': 'Ahmed Khan',
        'createdAt': '2024-01-21T09:00:00.000Z',
    },
    {
        'id': 'ord-3',
        'customerName': 'Hassan Ali',
        'customerEmail': 'hassan@example.com',
        'userId': 'cust-1',
        'originCity': 'Rawalpindi',
        'destinationCity': 'Multan',
        'price': 300,
        'createdAt': '2024-02-01T12:00:00.000Z',
    },
    {
        'id': 'ord-4',
        'customerName': 'Usman Shah',
        'customerEmail': 'usman@example.com',
        'userId': 'cust-3',
        'originCity': 'Karachi',
        'destinationCity': 'Quetta',
        'price': 900,
        'status': 'assigned',
        'riderUid': 'rider-uid-2',
        'createdAt': '2024-02-03T08:15:00.000Z',
    },
]

USERS = [
    {'id': 'rider-1', 'firstName': 'Ahmed', 'lastName': 'Khan', 'phone': '+92-300-1111111',
     'email': 'ahmed@example.com', 'role': 'rider', 'status': 'approved'},
    {'uid': 'rider-uid-2', 'name': 'Bilal', 'driverPhone': '+92-300-2222222',
     'role': 'Rider', 'status': 'Active'},
    {'id': 'rider-3', 'firstName': 'Pending', 'role': 'rider', 'status': 'pending'},
    {'id': 'cust-1', 'firstName': 'Ali', 'role': 'customer', 'status': 'approved'},
]


class MemoryStore(DocumentStore):
    """In-memory document store with the same contract as the SQLite store"""

    def __init__(self, collections=None):
        self.collections = copy.deepcopy(collections or {})
        self.calls = []

    def list_all(self, collection):
        self.calls.append(('list_all', collection))
        return copy.deepcopy(self.collections.get(collection, []))

    def update(self, collection, doc_id, fields):
        self.calls.append(('update', collection, doc_id, copy.deepcopy(fields)))
        for doc in self.collections.get(collection, []):
            if doc['id'] == doc_id:
                doc.update({k: v for k, v in fields.items() if k != 'id'})
                return
        raise StoreError(f"No document {collection}/{doc_id}")

    def delete(self, collection, doc_id):
        self.calls.append(('delete', collection, doc_id))
        docs = self.collections.get(collection, [])
        for i, doc in enumerate(docs):
            if doc['id'] == doc_id:
                del docs[i]
                return
        raise StoreError(f"No document {collection}/{doc_id}")

    def get(self, collection, doc_id):
        for doc in self.collections.get(collection, []):
            if doc['id'] == doc_id:
                return copy.deepcopy(doc)
        return None


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="dispatchdesk-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture(autouse=True)
def isolated_log_db(tmp_db_dir, monkeypatch):
    """Keep the app_logs table out of the working directory"""
    monkeypatch.setattr(Config, 'ANALYTICS_DB', os.path.join(tmp_db_dir, 'analytics.db'))


@pytest.fixture
def orders():
    return copy.deepcopy(ORDERS)


@pytest.fixture
def users():
    return copy.deepcopy(USERS)


@pytest.fixture
def memory_store():
    return MemoryStore({'orders': ORDERS, 'users': USERS})


@pytest.fixture
def sqlite_store(tmp_db_dir):
    store = SQLiteDocumentStore(os.path.join(tmp_db_dir, 'orders.db'))
    for order in ORDERS:
        store.insert('orders', order, doc_id=order['id'])
    for user in USERS:
        store.insert('users', user, doc_id=user.get('id') or user.get('uid'))
    return store


@pytest.fixture
def app(tmp_db_dir, sqlite_store):
    """Flask app with Dispatch Desk registered over a seeded SQLite store."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    app.config["ORDERS_DB"] = sqlite_store.path
    app.config["ANALYTICS_DB"] = os.path.join(tmp_db_dir, "analytics.db")
    DispatchDesk(app)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with an admin session"""
    with client.session_transaction() as sess:
        sess['admin_id'] = 1
        sess['admin_email'] = 'admin@example.com'
    return client
