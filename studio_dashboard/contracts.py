"""Contract normalization and derived money amounts.

Contracts arrive from the document store in several historical shapes:
service lines may live under ``services`` or under the booking form's
``formSnapshot.cartItems``, prices may be currency-formatted strings, and
status may be missing entirely.  :func:`normalize_contract` resolves all of
that once into a :class:`Contract`, and :func:`derive_amounts` turns a
contract into the figures every page reports.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

SERVICE_SOURCE_EXPLICIT = 'explicit'
SERVICE_SOURCE_SNAPSHOT = 'snapshot'
SERVICE_SOURCE_NONE = 'none'

CONTRACT_STATUSES = (
    'pending_approval',
    'booked',
    'confirmed',
    'pending_payment',
    'delivered',
    'cancelled',
    'released',
)
LEGACY_STATUSES = ('pending',)

DATE_FIELDS = ('contractDate', 'eventDate', 'createdAt')

SERVICE_DEPOSIT_RATE = 0.2
STORE_DEPOSIT_RATE = 0.5

_NON_DIGITS = re.compile(r'[^0-9]')


@dataclass(frozen=True)
class ServiceSource:
    """Where a contract's service lines came from."""

    kind: str
    items: Tuple[Dict[str, Any], ...] = ()

    @property
    def has_lines(self) -> bool:
        return bool(self.items)


@dataclass(frozen=True)
class DerivedAmounts:
    services_total: float
    store_total: float
    travel: float
    total_amount: int
    deposit_amount: int
    remaining_amount: int

    def as_dict(self) -> Dict[str, float]:
        return {
            'servicesTotal': self.services_total,
            'storeTotal': self.store_total,
            'travel': self.travel,
            'totalAmount': self.total_amount,
            'depositAmount': self.deposit_amount,
            'remainingAmount': self.remaining_amount,
        }


@dataclass
class Contract:
    id: str
    client_name: str
    effective_date: Optional[str]
    total_amount: float
    travel_fee: float
    store_items: List[Dict[str, Any]]
    service_source: ServiceSource
    event_completed: bool
    deposit_paid: Optional[bool]
    final_payment_paid: Optional[bool]
    status: str
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def amounts(self) -> DerivedAmounts:
        return derive_amounts(self)

    @property
    def display_client(self) -> str:
        return self.client_name or 'Cliente'


def to_number(value: Any) -> float:
    """Coerce a stored numeric field to float; anything unparsable becomes 0."""
    if value is None or isinstance(value, bool):
        return float(value or 0)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def price_from_digits(value: Any) -> float:
    """Parse a service price by keeping only its digits ("R$ 1.000" -> 1000)."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    digits = _NON_DIGITS.sub('', str(value))
    return float(digits) if digits else 0.0


def round_half_up(value: float) -> int:
    """Round half up, the way the booking forms round totals."""
    return int(math.floor(value + 0.5))


def effective_date(record: Mapping[str, Any]) -> Optional[str]:
    """First non-empty of ``contractDate``, ``eventDate``, ``createdAt``."""
    for key in DATE_FIELDS:
        value = record.get(key)
        if value:
            return str(value)
    return None


def resolve_status(record: Mapping[str, Any]) -> str:
    status = record.get('status')
    if status:
        return str(status)
    if record.get('eventCompleted') and record.get('finalPaymentPaid'):
        return 'delivered'
    if record.get('depositPaid') is False:
        return 'pending_payment'
    return 'booked'


def resolve_service_source(record: Mapping[str, Any]) -> ServiceSource:
    services = record.get('services')
    if isinstance(services, list) and services:
        return ServiceSource(SERVICE_SOURCE_EXPLICIT, tuple(_as_item(it) for it in services))
    snapshot = record.get('formSnapshot')
    cart = snapshot.get('cartItems') if isinstance(snapshot, Mapping) else None
    if isinstance(cart, list) and cart:
        return ServiceSource(SERVICE_SOURCE_SNAPSHOT, tuple(_as_item(it) for it in cart))
    return ServiceSource(SERVICE_SOURCE_NONE)


def _as_item(item: Any) -> Dict[str, Any]:
    return dict(item) if isinstance(item, Mapping) else {}


def normalize_contract(record: Mapping[str, Any]) -> Contract:
    """Resolve a raw contract document into a :class:`Contract`."""
    store_items = record.get('storeItems')
    return Contract(
        id=str(record.get('id') or ''),
        client_name=str(record.get('clientName') or ''),
        effective_date=effective_date(record),
        total_amount=to_number(record.get('totalAmount')),
        travel_fee=to_number(record.get('travelFee')),
        store_items=[_as_item(it) for it in store_items] if isinstance(store_items, list) else [],
        service_source=resolve_service_source(record),
        event_completed=bool(record.get('eventCompleted')),
        deposit_paid=record.get('depositPaid'),
        final_payment_paid=record.get('finalPaymentPaid'),
        status=resolve_status(record),
        raw=dict(record),
    )


def services_subtotal(source: ServiceSource) -> float:
    total = 0.0
    for item in source.items:
        quantity = item.get('quantity')
        qty = 1.0 if quantity is None else to_number(quantity)
        total += price_from_digits(item.get('price')) * qty
    return total


def store_subtotal(items: List[Dict[str, Any]]) -> float:
    return sum(to_number(it.get('price')) * to_number(it.get('quantity') or 1) for it in items)


def derive_amounts(contract: Union[Contract, Mapping[str, Any]]) -> DerivedAmounts:
    """Compute services/store/travel totals, the deposit and the remaining balance.

    Only the final total is rounded.  When the contract has no priced service
    lines, the services figure is whatever the stored total leaves after the
    store items and travel fee.
    """
    if not isinstance(contract, Contract):
        contract = normalize_contract(contract)

    store_total = store_subtotal(contract.store_items)
    travel = contract.travel_fee
    services = services_subtotal(contract.service_source)
    if services <= 0:
        services = max(0.0, contract.total_amount - store_total - travel)

    total = max(0, round_half_up(services + store_total + travel))
    if services == 0:
        deposit = math.ceil(store_total * STORE_DEPOSIT_RATE)
    else:
        deposit = math.ceil(services * SERVICE_DEPOSIT_RATE + store_total * STORE_DEPOSIT_RATE)
    remaining = max(0, total - deposit)

    return DerivedAmounts(
        services_total=services,
        store_total=store_total,
        travel=travel,
        total_amount=total,
        deposit_amount=deposit,
        remaining_amount=remaining,
    )


def normalize_contracts(records: List[Mapping[str, Any]]) -> List[Contract]:
    return [normalize_contract(record) for record in records]
