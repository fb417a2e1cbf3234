"""Contract bookkeeping actions triggered from the admin calendar.

Each write goes straight to the ``contracts`` collection and then tells the
rest of the dashboard about it through :data:`~studio_dashboard.events.app_events`.
Reads used to populate the calendar fall back to an empty list when the
store is unavailable.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from . import db
from .calendar_view import base_contract_id
from .config import CONTRACTS, PRODUCTS
from .contracts import CONTRACT_STATUSES, to_number
from .events import AppEvents, ContractDeleted, ContractsChanged, OpenContractEditor, app_events
from .exceptions import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

BOOKING_SOURCE_COLLECTIONS = ('events', 'bookingRequests', 'pending_contracts', 'event_bookings')
LINK_FIELDS = ('eventId', 'originalEventId', 'bookingId')
DRESS_KEYWORDS = ('vestid', 'dress')
WORKFLOW_FLAGS = ('depositPaid', 'finalPaymentPaid', 'isEditing', 'eventCompleted')
EDITABLE_FIELDS = (
    'clientName', 'clientEmail', 'phone', 'eventType', 'eventDate', 'eventTime',
    'eventLocation', 'paymentMethod', 'totalAmount', 'travelFee',
)
NUMERIC_FIELDS = ('totalAmount', 'travelFee')

DEFAULT_EVENT_TYPE = 'Evento'
DEFAULT_EVENT_TIME = '00:00'
DEFAULT_PAYMENT_METHOD = 'pix'


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_contracts() -> List[Dict[str, Any]]:
    """All contract documents, ordered by creation time (newest first)."""
    return db.fetch_collection_safe(CONTRACTS, order_by='createdAt', descending=True)


def new_booking_payload(form: Mapping[str, Any]) -> Dict[str, Any]:
    """A freshly booked contract built from a booking form or a booking record."""
    return {
        'clientName': form.get('clientName'),
        'clientEmail': form.get('clientEmail') or '',
        'eventType': form.get('eventType') or DEFAULT_EVENT_TYPE,
        'eventDate': form.get('eventDate'),
        'eventTime': form.get('eventTime') or DEFAULT_EVENT_TIME,
        'eventLocation': form.get('eventLocation') or '',
        'phone': form.get('phone') or '',
        'paymentMethod': form.get('paymentMethod') or DEFAULT_PAYMENT_METHOD,
        'depositPaid': False,
        'finalPaymentPaid': False,
        'eventCompleted': False,
        'isEditing': False,
        'createdAt': _utc_now(),
        'totalAmount': to_number(form.get('totalAmount')),
        'travelFee': to_number(form.get('travelFee')),
        'status': 'booked',
    }


def add_event(form: Mapping[str, Any], events: Optional[AppEvents] = None) -> str:
    """Create a booked contract and ask the contract editor to open it.

    Raises:
        ValidationError: If the client name or the event date is missing
        StoreError: If the contract could not be written
    """
    events = events or app_events
    if not form.get('clientName') or not form.get('eventDate'):
        raise ValidationError('Nombre del cliente y fecha del evento son obligatorios', code='booking_incomplete')
    try:
        contract_id = db.add_document(CONTRACTS, new_booking_payload(form))
    except StoreError:
        logger.exception("Error adding event for %s", form.get('clientName'))
        events.notify('Error al crear el evento', 'error')
        raise
    logger.info("Booked contract %s for %s on %s", contract_id, form.get('clientName'), form.get('eventDate'))
    events.contracts_changed.emit(ContractsChanged(reason='added'))
    events.open_contract_editor.emit(OpenContractEditor(contract_id=contract_id))
    return contract_id


def _update_contract(
    contract_id: str,
    fields: Dict[str, Any],
    events: AppEvents,
    reason: str,
) -> Dict[str, Any]:
    base_id = base_contract_id(contract_id)
    try:
        merged = db.update_document(CONTRACTS, base_id, fields)
    except (StoreError, NotFoundError):
        logger.exception("Error updating contract %s", base_id)
        events.notify('Error al actualizar', 'error')
        raise
    events.contracts_changed.emit(ContractsChanged(reason=reason))
    events.notify('Estado actualizado', 'success')
    return merged


def update_status(contract_id: str, status: str, events: Optional[AppEvents] = None) -> Dict[str, Any]:
    """Set a contract's lifecycle status (calendar event ids are accepted too)."""
    if status not in CONTRACT_STATUSES:
        raise ValidationError(f"Unknown contract status '{status}'", code='status_invalid')
    return _update_contract(contract_id, {'status': status}, events or app_events, 'status')


def update_workflow(contract_id: str, updates: Mapping[str, Any], events: Optional[AppEvents] = None) -> Dict[str, Any]:
    """Toggle the deposit / final payment / editing / completed flags of a contract."""
    unknown = set(updates) - set(WORKFLOW_FLAGS)
    if unknown:
        raise ValidationError(f"Unknown workflow flag(s): {', '.join(sorted(unknown))}", code='workflow_invalid')
    fields = {key: bool(value) for key, value in updates.items()}
    return _update_contract(contract_id, fields, events or app_events, 'workflow')


def update_contract(contract_id: str, fields: Mapping[str, Any], events: Optional[AppEvents] = None) -> Dict[str, Any]:
    """Save the contract editor's fields; anything outside the editable set is rejected."""
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Field(s) not editable: {', '.join(sorted(unknown))}", code='field_not_editable')
    if 'clientName' in fields and not fields['clientName']:
        raise ValidationError('El nombre del cliente es obligatorio', code='client_missing')
    cleaned = {
        key: to_number(value) if key in NUMERIC_FIELDS else value
        for key, value in fields.items()
    }
    return _update_contract(contract_id, cleaned, events or app_events, 'edited')


def open_contract(contract_id: str, events: Optional[AppEvents] = None) -> str:
    """Ask the contract editor to show the contract behind a calendar event."""
    base_id = base_contract_id(contract_id)
    (events or app_events).open_contract_editor.emit(OpenContractEditor(contract_id=base_id))
    return base_id


def delete_contract(contract_id: str, events: Optional[AppEvents] = None) -> str:
    """Delete the contract behind a calendar event and announce it.

    Returns the base contract id that was removed.
    """
    events = events or app_events
    base_id = base_contract_id(contract_id)
    try:
        db.delete_document(CONTRACTS, base_id)
    except StoreError:
        logger.exception("Error deleting contract %s", base_id)
        events.notify('Error al eliminar el evento', 'error')
        raise
    logger.info("Deleted contract %s", base_id)
    events.contract_deleted.emit(ContractDeleted(contract_id=base_id))
    events.contracts_changed.emit(ContractsChanged(reason='deleted'))
    events.notify('Evento eliminado correctamente', 'success')
    return base_id


def linked_record_ids(contracts: Iterable[Mapping[str, Any]]) -> set:
    """Ids of booking records some contract already points to."""
    linked = set()
    for contract in contracts:
        for key in LINK_FIELDS:
            if contract.get(key):
                linked.add(str(contract[key]))
    return linked


def sync_calendar_with_contracts(
    source_collections: Sequence[str] = BOOKING_SOURCE_COLLECTIONS,
    events: Optional[AppEvents] = None,
) -> int:
    """Create a booked contract for every booking record that has none yet.

    A record qualifies when it carries a client name and an event date and no
    contract links to it through ``eventId``, ``originalEventId`` or
    ``bookingId``.  A collection that cannot be read is skipped.  Returns the
    number of contracts created.
    """
    events = events or app_events
    created = 0
    try:
        for collection_name in source_collections:
            try:
                records = db.fetch_collection(collection_name)
            except StoreError as exc:
                logger.warning("Skipping booking source '%s': %s", collection_name, exc)
                continue
            if not records:
                continue
            linked = linked_record_ids(db.fetch_collection(CONTRACTS))
            for record in records:
                if record['id'] in linked or not record.get('clientName') or not record.get('eventDate'):
                    continue
                payload = new_booking_payload(record)
                payload['bookingId'] = record['id']
                payload['originalEventId'] = record['id']
                db.add_document(CONTRACTS, payload)
                linked.add(record['id'])
                created += 1
    except StoreError:
        logger.exception("Error syncing calendar with contracts")
        events.notify('Error al sincronizar', 'error')
        raise

    if created:
        logger.info("Created %d contract(s) from booking records", created)
        events.contracts_changed.emit(ContractsChanged(reason='sync'))
        events.notify(f'{created} contrato(s) creado(s)', 'success')
    else:
        events.notify('No hay eventos sin contrato', 'info')
    return created


def load_dress_options(keywords: Sequence[str] = DRESS_KEYWORDS) -> List[Dict[str, str]]:
    """Store products that are dresses, for the contract dress picker."""
    options = []
    for product in db.fetch_collection_safe(PRODUCTS):
        category = str(product.get('category') or '').lower()
        if not any(keyword in category for keyword in keywords):
            continue
        tags = product.get('tags')
        options.append({
            'id': product['id'],
            'name': product.get('name') or 'Vestido',
            'image': product.get('image_url') or product.get('image') or '',
            'color': str(tags[0]) if isinstance(tags, list) and tags else '',
        })
    return options


def selected_dresses(contract: Mapping[str, Any], options: Sequence[Mapping[str, str]]) -> List[Mapping[str, str]]:
    """Dress options picked in the booking form (``formSnapshot.selectedDresses``), in picking order."""
    snapshot = contract.get('formSnapshot') if isinstance(contract.get('formSnapshot'), Mapping) else {}
    picked = snapshot.get('selectedDresses')
    if not isinstance(picked, list):
        return []
    by_id = {option['id']: option for option in options}
    return [by_id[str(dress_id)] for dress_id in picked if str(dress_id) in by_id]
