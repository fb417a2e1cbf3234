import sqlite3

import pytest

from studio_dashboard.exceptions import NotFoundError, StoreError


def test_add_get_update_delete(store):
    doc_id = store.add_document('contracts', {'clientName': 'Ana', 'totalAmount': 1000})
    doc = store.get_document('contracts', doc_id)
    assert doc == {'id': doc_id, 'clientName': 'Ana', 'totalAmount': 1000}

    merged = store.update_document('contracts', doc_id, {'depositPaid': True})
    assert merged['clientName'] == 'Ana'
    assert store.get_document('contracts', doc_id)['depositPaid'] is True

    assert store.delete_document('contracts', doc_id) is True
    assert store.get_document('contracts', doc_id) is None
    assert store.delete_document('contracts', doc_id) is False


def test_update_missing_document_raises(store):
    with pytest.raises(NotFoundError):
        store.update_document('contracts', 'nope', {'status': 'booked'})


def test_set_document_overwrites(store):
    store.set_document('products', 'p1', {'name': 'Vestido', 'tags': ['rojo']})
    store.set_document('products', 'p1', {'name': 'Vestido largo'})
    assert store.get_document('products', 'p1') == {'id': 'p1', 'name': 'Vestido largo'}


def test_collections_are_isolated(store):
    store.set_document('contracts', 'same', {'kind': 'contract'})
    store.set_document('orders', 'same', {'kind': 'order'})
    assert store.get_document('contracts', 'same')['kind'] == 'contract'
    assert [d['kind'] for d in store.fetch_collection('orders')] == ['order']
    assert store.list_collections() == ['contracts', 'orders']


def test_fetch_collection_ordering(store):
    store.add_document('budget_transactions', {'date': '2024-05-02'})
    store.add_document('budget_transactions', {'date': '2024-05-10'})
    store.add_document('budget_transactions', {'date': '2024-05-01'})

    ascending = [d['date'] for d in store.fetch_collection('budget_transactions', order_by='date')]
    descending = [d['date'] for d in store.fetch_collection('budget_transactions', order_by='date', descending=True)]
    insertion = [d['date'] for d in store.fetch_collection('budget_transactions')]

    assert ascending == ['2024-05-01', '2024-05-02', '2024-05-10']
    assert descending == ['2024-05-10', '2024-05-02', '2024-05-01']
    assert insertion == ['2024-05-02', '2024-05-10', '2024-05-01']


def test_transaction_commits_all_writes(store):
    with store.transaction() as batch:
        first = batch.add('budget_envelopes', {'name': 'A', 'spent': 0})
        batch.update('budget_envelopes', first, {'spent': 10})
    assert store.get_document('budget_envelopes', first)['spent'] == 10


def test_transaction_rolls_back_on_error(store):
    store.set_document('budget_envelopes', 'env', {'name': 'A', 'spent': 0})
    with pytest.raises(NotFoundError):
        with store.transaction() as batch:
            batch.add('budget_transactions', {'amount': 5})
            batch.update('budget_envelopes', 'env', {'spent': 5})
            batch.update('budget_envelopes', 'missing', {'spent': 5})

    assert store.fetch_collection('budget_transactions') == []
    assert store.get_document('budget_envelopes', 'env')['spent'] == 0


def test_sqlite_errors_become_store_errors(store, monkeypatch):
    def broken_insert(*args, **kwargs):
        raise sqlite3.OperationalError('database is locked')

    monkeypatch.setattr(store, '_insert', broken_insert)
    with pytest.raises(StoreError):
        store.add_document('contracts', {'clientName': 'Ana'})
    with pytest.raises(StoreError):
        with store.transaction() as batch:
            batch.add('contracts', {'clientName': 'Ana'})


def test_fetch_collection_safe_returns_empty_on_failure(store, monkeypatch):
    def broken_fetch(*args, **kwargs):
        raise StoreError('permission denied')

    monkeypatch.setattr(store, 'fetch_collection', broken_fetch)
    assert store.fetch_collection_safe('contracts') == []


def test_collection_frame(store):
    assert store.collection_frame('orders').empty
    store.add_document('orders', {'total': 120.0, 'status': 'paid'})
    frame = store.collection_frame('orders')
    assert list(frame.columns) == ['id', 'total', 'status']
    assert frame.loc[0, 'total'] == 120.0


def test_clear_collection(store):
    store.add_document('orders', {'total': 1})
    store.add_document('orders', {'total': 2})
    assert store.clear_collection('orders') == 2
    assert store.fetch_collection('orders') == []


def test_batch_fetch_sees_uncommitted_writes(store):
    store.add_document('budget_envelopes', {'name': 'A'})
    with store.transaction() as batch:
        batch.add('budget_envelopes', {'name': 'B'})
        assert [d['name'] for d in batch.fetch('budget_envelopes', order_by='name', descending=True)] == ['B', 'A']


def test_document_timestamps_are_utc(store):
    doc_id = store.add_document('orders', {'total': 1})
    with store.connect() as conn:
        row = conn.execute("SELECT created_at FROM documents WHERE id = ?", (doc_id,)).fetchone()
    assert row['created_at'].endswith('+00:00')
