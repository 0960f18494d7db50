"""
Tests for the SQLite document store and the persistent log table.
"""

import os
import sqlite3

import pytest

from dispatchdesk.core.database import SQLiteDocumentStore
from dispatchdesk.core.errors import StoreError
from dispatchdesk.core.logging_service import LoggingService


@pytest.fixture
def store(tmp_db_dir):
    return SQLiteDocumentStore(os.path.join(tmp_db_dir, 'nested', 'docs.db'))


def test_list_all_on_empty_collection(store):
    assert store.list_all('orders') == []


def test_insert_generates_id_and_lists_in_order(store):
    first = store.insert('orders', {'customerName': 'A'})
    second = store.insert('orders', {'customerName': 'B'}, doc_id='fixed')

    docs = store.list_all('orders')
    assert [d['id'] for d in docs] == [first, 'fixed']
    assert docs[0]['customerName'] == 'A'
    assert second == 'fixed'


def test_collections_are_separate(store):
    store.insert('orders', {'x': 1}, doc_id='1')
    store.insert('users', {'x': 2}, doc_id='1')
    assert store.get('orders', '1')['x'] == 1
    assert store.get('users', '1')['x'] == 2


def test_update_merges_fields(store):
    store.insert('orders', {'status': 'pending', 'price': 10}, doc_id='o1')
    store.update('orders', 'o1', {'status': 'assigned', 'id': 'ignored'})

    doc = store.get('orders', 'o1')
    assert doc == {'id': 'o1', 'status': 'assigned', 'price': 10}


def test_update_missing_document_raises(store):
    with pytest.raises(StoreError):
        store.update('orders', 'nope', {'status': 'assigned'})


def test_delete(store):
    store.insert('orders', {}, doc_id='o1')
    store.delete('orders', 'o1')
    assert store.get('orders', 'o1') is None
    with pytest.raises(StoreError):
        store.delete('orders', 'o1')


def test_corrupt_document_raises_store_error(store):
    store.insert('orders', {}, doc_id='bad')
    with sqlite3.connect(store.path) as conn:
        conn.execute("UPDATE documents SET data = 'not json' WHERE id = 'bad'")
        conn.commit()
    with pytest.raises(StoreError):
        store.list_all('orders')


def test_logging_service_persists_rows():
    LoggingService.log_user_action('orders', 'delete order', details={'order_id': 'o1'})
    LoggingService.warning('riders', 'Failed to fetch riders')

    rows = LoggingService.recent_logs()
    assert rows[0]['source'] == 'riders'
    assert rows[0]['level'] == 'WARNING'
    assert rows[1]['message'] == 'User action: delete order'
    assert '"order_id": "o1"' in rows[1]['details']
    assert len(LoggingService.recent_logs(source='orders')) == 1
