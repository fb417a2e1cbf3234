import pytest

from studio_dashboard import bookings
from studio_dashboard.events import ContractDeleted, ContractsChanged, OpenContractEditor
from studio_dashboard.exceptions import NotFoundError, ValidationError


@pytest.fixture
def captured(events):
    """Record every contract-related signal emitted on the private bus."""
    seen = {'changed': [], 'deleted': [], 'opened': []}
    events.contracts_changed.connect(seen['changed'].append)
    events.contract_deleted.connect(seen['deleted'].append)
    events.open_contract_editor.connect(seen['opened'].append)
    return seen


def test_add_event_creates_booked_contract(store, events, captured):
    contract_id = bookings.add_event(
        {'clientName': 'Ana', 'eventDate': '2024-06-01', 'totalAmount': '1500'},
        events=events,
    )
    doc = store.get_document('contracts', contract_id)
    assert doc['status'] == 'booked'
    assert doc['eventType'] == 'Evento'
    assert doc['eventTime'] == '00:00'
    assert doc['paymentMethod'] == 'pix'
    assert doc['totalAmount'] == 1500.0
    assert doc['travelFee'] == 0.0
    assert not any(doc[flag] for flag in bookings.WORKFLOW_FLAGS)
    assert doc['createdAt']

    assert captured['changed'] == [ContractsChanged(reason='added')]
    assert captured['opened'] == [OpenContractEditor(contract_id=contract_id)]


@pytest.mark.parametrize('form', [
    {'clientName': 'Ana'},
    {'eventDate': '2024-06-01'},
    {'clientName': '', 'eventDate': '2024-06-01'},
])
def test_add_event_requires_client_and_date(store, events, captured, form):
    with pytest.raises(ValidationError):
        bookings.add_event(form, events=events)
    assert store.fetch_collection('contracts') == []
    assert captured['changed'] == []


def test_delete_contract_accepts_calendar_event_id(store, events, captured):
    store.set_document('contracts', 'c1', {'clientName': 'Ana'})

    removed = bookings.delete_contract('c1__event_1', events=events)

    assert removed == 'c1'
    assert store.get_document('contracts', 'c1') is None
    assert captured['deleted'] == [ContractDeleted(contract_id='c1')]
    assert captured['changed'] == [ContractsChanged(reason='deleted')]
    assert events.toasts[-1].message == 'Evento eliminado correctamente'
    assert events.toasts[-1].kind == 'success'


def test_update_status(store, events, captured):
    store.set_document('contracts', 'c1', {'clientName': 'Ana', 'status': 'booked'})
    bookings.update_status('c1__event_0', 'confirmed', events=events)
    assert store.get_document('contracts', 'c1')['status'] == 'confirmed'
    assert events.toasts[-1].message == 'Estado actualizado'

    with pytest.raises(ValidationError):
        bookings.update_status('c1', 'archived', events=events)


def test_update_missing_contract_announces_error(store, events):
    with pytest.raises(NotFoundError):
        bookings.update_status('ghost', 'confirmed', events=events)
    assert events.toasts[-1].kind == 'error'
    assert events.toasts[-1].message == 'Error al actualizar'


def test_update_workflow_coerces_flags(store, events):
    store.set_document('contracts', 'c1', {'clientName': 'Ana', 'depositPaid': False})
    bookings.update_workflow('c1', {'depositPaid': 1, 'isEditing': ''}, events=events)
    doc = store.get_document('contracts', 'c1')
    assert doc['depositPaid'] is True
    assert doc['isEditing'] is False
    with pytest.raises(ValidationError):
        bookings.update_workflow('c1', {'status': 'booked'}, events=events)


def test_update_contract_rejects_unknown_fields(store, events):
    store.set_document('contracts', 'c1', {'clientName': 'Ana', 'totalAmount': 100})
    bookings.update_contract('c1', {'eventLocation': 'Praia', 'travelFee': '80'}, events=events)
    doc = store.get_document('contracts', 'c1')
    assert doc['eventLocation'] == 'Praia'
    assert doc['travelFee'] == 80.0

    with pytest.raises(ValidationError):
        bookings.update_contract('c1', {'status': 'cancelled'}, events=events)
    with pytest.raises(ValidationError):
        bookings.update_contract('c1', {'clientName': ''}, events=events)


def test_open_contract_emits_base_id(events, captured):
    assert bookings.open_contract('c9__event_2', events=events) == 'c9'
    assert captured['opened'] == [OpenContractEditor(contract_id='c9')]


def test_sync_creates_contracts_for_unlinked_records(store, events, captured):
    store.set_document('contracts', 'c1', {'clientName': 'Ana', 'bookingId': 'b-linked'})
    store.set_document('bookingRequests', 'b-linked', {'clientName': 'Ana', 'eventDate': '2024-06-01'})
    store.set_document('bookingRequests', 'b-new', {'clientName': 'Bruno', 'eventDate': '2024-07-01', 'eventTime': '15:00'})
    store.set_document('events', 'e-incomplete', {'clientName': 'Carla'})
    store.set_document('event_bookings', 'e-new', {'clientName': 'Dora', 'eventDate': '2024-08-01'})

    assert bookings.sync_calendar_with_contracts(events=events) == 2

    created = {doc['bookingId']: doc for doc in store.fetch_collection('contracts') if doc['id'] != 'c1'}
    assert set(created) == {'b-new', 'e-new'}
    assert created['b-new']['originalEventId'] == 'b-new'
    assert created['b-new']['eventTime'] == '15:00'
    assert created['b-new']['status'] == 'booked'
    assert captured['changed'] == [ContractsChanged(reason='sync')]
    assert events.toasts[-1].message == '2 contrato(s) creado(s)'

    assert bookings.sync_calendar_with_contracts(events=events) == 0
    assert events.toasts[-1].kind == 'info'
    assert len(store.fetch_collection('contracts')) == 3


def test_linked_record_ids():
    contracts = [
        {'eventId': 'a'},
        {'originalEventId': 'b', 'bookingId': 'c'},
        {'eventId': None},
    ]
    assert bookings.linked_record_ids(contracts) == {'a', 'b', 'c'}


def test_load_dress_options(store):
    store.set_document('products', 'p1', {'name': 'Vestido azul', 'category': 'Vestidos', 'tags': ['azul'], 'image_url': 'a.jpg'})
    store.set_document('products', 'p2', {'category': 'Wedding Dress'})
    store.set_document('products', 'p3', {'name': 'Álbum', 'category': 'Álbumes'})

    options = {option['id']: option for option in bookings.load_dress_options()}

    assert set(options) == {'p1', 'p2'}
    assert options['p1'] == {'id': 'p1', 'name': 'Vestido azul', 'image': 'a.jpg', 'color': 'azul'}
    assert options['p2']['name'] == 'Vestido'
    assert options['p2']['color'] == ''


def test_load_contracts_newest_first(store):
    store.add_document('contracts', {'clientName': 'old', 'createdAt': '2024-01-01T00:00:00'})
    store.add_document('contracts', {'clientName': 'new', 'createdAt': '2024-03-01T00:00:00'})
    assert [c['clientName'] for c in bookings.load_contracts()] == ['new', 'old']


def test_selected_dresses_follow_booking_form_order():
    options = [
        {'id': 'p1', 'name': 'Rojo', 'image': '', 'color': ''},
        {'id': 'p2', 'name': 'Azul', 'image': '', 'color': ''},
    ]
    contract = {'formSnapshot': {'selectedDresses': ['p2', 'gone', 'p1']}}
    assert [d['name'] for d in bookings.selected_dresses(contract, options)] == ['Azul', 'Rojo']
    assert bookings.selected_dresses({'formSnapshot': None}, options) == []
