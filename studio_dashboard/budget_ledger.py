"""Envelope budgeting ledger.

Envelopes hold an allocation and a running ``spent`` figure; the
transaction log records every income entry and every expense drawn from an
envelope.  Balances shown to the user (``available`` per envelope and the
page totals) are always recomputed from the current documents, never kept
as counters of their own.

Recording or deleting an expense touches two documents (the transaction and
its envelope).  Both writes are expressed as a command object and executed
in a single store transaction, so a failure leaves neither behind.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from . import db
from .config import BUDGET_ENVELOPES, BUDGET_TRANSACTIONS
from .contracts import to_number
from .events import AppEvents, app_events
from .exceptions import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

INCOME = 'income'
EXPENSE = 'expense'
INCOME_CATEGORY = 'Ingresos'
INCOME_DESCRIPTION = 'Ingreso'
EXPENSE_DESCRIPTION = 'Gasto'

PROGRESS_WARNING = 50.0
PROGRESS_DANGER = 80.0

# thousands grouping ("1,000", "1.000,50") is rejected; a lone comma is the decimal mark
_GROUPED_AMOUNT = re.compile(r',\d{3}(?!\d)|\..*,|,.*\.')


@dataclass
class Envelope:
    id: str
    name: str
    percentage: float = 0.0
    allocated: float = 0.0
    spent: float = 0.0

    @property
    def available(self) -> float:
        return self.allocated - self.spent

    @property
    def progress_percent(self) -> float:
        return (self.spent / self.allocated * 100) if self.allocated > 0 else 0.0

    @property
    def progress_band(self) -> str:
        return progress_band(self.progress_percent)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> 'Envelope':
        return cls(
            id=str(doc.get('id') or ''),
            name=str(doc.get('name') or ''),
            percentage=to_number(doc.get('percentage')),
            allocated=to_number(doc.get('allocated')),
            spent=to_number(doc.get('spent')),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'percentage': self.percentage,
            'allocated': self.allocated,
            'spent': self.spent,
        }


@dataclass
class BudgetTransaction:
    id: str
    date: str
    description: str
    category: str
    type: str
    amount: float
    envelope_id: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def is_envelope_expense(self) -> bool:
        return self.type == EXPENSE and bool(self.envelope_id)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> 'BudgetTransaction':
        return cls(
            id=str(doc.get('id') or ''),
            date=str(doc.get('date') or ''),
            description=str(doc.get('description') or ''),
            category=str(doc.get('category') or ''),
            type=str(doc.get('type') or ''),
            amount=to_number(doc.get('amount')),
            envelope_id=doc.get('envelopeId') or None,
            timestamp=doc.get('timestamp'),
        )

    def to_document(self) -> Dict[str, Any]:
        payload = {
            'date': self.date,
            'description': self.description,
            'category': self.category,
            'type': self.type,
            'amount': self.amount,
            'timestamp': self.timestamp,
        }
        if self.envelope_id:
            payload['envelopeId'] = self.envelope_id
        return payload


@dataclass
class BudgetSummary:
    envelopes: List[Envelope] = field(default_factory=list)
    transactions: List[BudgetTransaction] = field(default_factory=list)

    @property
    def total_allocated(self) -> float:
        return sum(e.allocated for e in self.envelopes)

    @property
    def total_spent(self) -> float:
        return sum(e.spent for e in self.envelopes)

    @property
    def total_income(self) -> float:
        return sum(t.amount for t in self.transactions if t.type == INCOME)

    @property
    def total_available(self) -> float:
        return self.total_income - self.total_spent

    def envelope(self, envelope_id: str) -> Optional[Envelope]:
        return next((e for e in self.envelopes if e.id == envelope_id), None)


@dataclass(frozen=True)
class ApplyExpense:
    """Record an expense against an envelope and draw the envelope down."""

    envelope_id: str
    amount: float
    description: str = ''


@dataclass(frozen=True)
class ReverseExpense:
    """Delete a transaction, giving an envelope expense back to its envelope first."""

    transaction_id: str


LedgerCommand = Union[ApplyExpense, ReverseExpense]


def progress_band(percent: float, warning: float = PROGRESS_WARNING, danger: float = PROGRESS_DANGER) -> str:
    if percent < warning:
        return 'green'
    if percent < danger:
        return 'yellow'
    return 'red'


def parse_amount(value: Any) -> float:
    """Validate a user-entered amount.

    Raises:
        ValidationError: If the value is empty, not a number, or not above zero
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Ingresa un monto", code='amount_missing')
    if isinstance(value, str) and _GROUPED_AMOUNT.search(value):
        raise ValidationError(f"'{value}' no es un monto válido", code='amount_invalid')
    try:
        amount = float(str(value).strip().replace(',', '.')) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{value}' no es un monto válido", code='amount_invalid') from None
    if amount != amount or amount <= 0:
        raise ValidationError("El monto debe ser mayor a 0", code='amount_not_positive')
    return amount


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BudgetLedger:
    """Reads and mutates the envelope budget in the document store."""

    def __init__(
        self,
        events: Optional[AppEvents] = None,
        today: Optional[Callable[[], str]] = None,
    ):
        self.events = events or app_events
        self._today = today or (lambda: datetime.now().date().isoformat())

    def load(self) -> BudgetSummary:
        """Fetch envelopes and transactions; a failed read shows up as an empty list."""
        envelopes = [Envelope.from_document(d) for d in db.fetch_collection_safe(BUDGET_ENVELOPES)]
        transactions = [
            BudgetTransaction.from_document(d)
            for d in db.fetch_collection_safe(BUDGET_TRANSACTIONS, order_by='date', descending=True)
        ]
        return BudgetSummary(envelopes=envelopes, transactions=transactions)

    def add_income(self, amount: Any) -> str:
        value = parse_amount(amount)
        transaction = BudgetTransaction(
            id='',
            date=self._today(),
            description=INCOME_DESCRIPTION,
            category=INCOME_CATEGORY,
            type=INCOME,
            amount=value,
            timestamp=_utc_now(),
        )
        try:
            doc_id = db.add_document(BUDGET_TRANSACTIONS, transaction.to_document())
        except StoreError:
            logger.exception("Error adding income of %s", value)
            self.events.notify('Error al agregar ingreso. Por favor, intenta de nuevo.', 'error')
            raise
        logger.info("Recorded income %s as %s", value, doc_id)
        return doc_id

    def add_expense(self, envelope_id: Optional[str], amount: Any, description: str = '') -> str:
        if not envelope_id:
            raise ValidationError("Selecciona un sobre presupuestario", code='envelope_missing')
        return self.execute(ApplyExpense(envelope_id=envelope_id, amount=parse_amount(amount), description=description))

    def delete_transaction(self, transaction_id: str) -> None:
        self.execute(ReverseExpense(transaction_id=transaction_id))

    def execute(self, command: LedgerCommand) -> Any:
        try:
            with db.transaction() as batch:
                if isinstance(command, ApplyExpense):
                    return self._apply_expense(batch, command)
                return self._reverse_expense(batch, command)
        except StoreError:
            logger.exception("Ledger command %r failed", command)
            self.events.notify('Error al actualizar el presupuesto. Por favor, intenta de nuevo.', 'error')
            raise

    def _apply_expense(self, batch: db.DocumentBatch, command: ApplyExpense) -> str:
        doc = batch.get(BUDGET_ENVELOPES, command.envelope_id)
        if doc is None:
            raise NotFoundError("Sobre presupuestario no encontrado", code='envelope_not_found')
        envelope = Envelope.from_document(doc)
        transaction = BudgetTransaction(
            id='',
            date=self._today(),
            description=command.description or EXPENSE_DESCRIPTION,
            category=envelope.name,
            type=EXPENSE,
            amount=command.amount,
            envelope_id=envelope.id,
            timestamp=_utc_now(),
        )
        doc_id = batch.add(BUDGET_TRANSACTIONS, transaction.to_document())
        batch.update(BUDGET_ENVELOPES, envelope.id, {'spent': envelope.spent + command.amount})
        logger.info("Expense %s drawn from envelope %s (%s)", command.amount, envelope.name, doc_id)
        return doc_id

    def _reverse_expense(self, batch: db.DocumentBatch, command: ReverseExpense) -> None:
        doc = batch.get(BUDGET_TRANSACTIONS, command.transaction_id)
        if doc is None:
            raise NotFoundError("Transacción no encontrada", code='transaction_not_found')
        transaction = BudgetTransaction.from_document(doc)
        if transaction.is_envelope_expense:
            envelope_doc = batch.get(BUDGET_ENVELOPES, transaction.envelope_id)
            if envelope_doc is not None:
                spent = Envelope.from_document(envelope_doc).spent
                batch.update(BUDGET_ENVELOPES, transaction.envelope_id, {'spent': max(0.0, spent - transaction.amount)})
        batch.delete(BUDGET_TRANSACTIONS, transaction.id)
        logger.info("Deleted %s transaction %s", transaction.type, transaction.id)

    def save_envelope(
        self,
        name: str,
        allocated: Any,
        percentage: Any = 0,
        envelope_id: Optional[str] = None,
    ) -> str:
        """Create an envelope, or update name/allocation of an existing one (spent is kept)."""
        if not name or not name.strip():
            raise ValidationError("El sobre necesita un nombre", code='envelope_name_missing')
        fields = {
            'name': name.strip(),
            'allocated': max(0.0, to_number(allocated)),
            'percentage': max(0.0, to_number(percentage)),
        }
        try:
            if envelope_id:
                db.update_document(BUDGET_ENVELOPES, envelope_id, fields)
                return envelope_id
            return db.add_document(BUDGET_ENVELOPES, {**fields, 'spent': 0.0})
        except StoreError:
            logger.exception("Error saving envelope %s", envelope_id or fields['name'])
            self.events.notify('Error al guardar el sobre. Por favor, intenta de nuevo.', 'error')
            raise

    def delete_envelope(self, envelope_id: str) -> bool:
        try:
            removed = db.delete_document(BUDGET_ENVELOPES, envelope_id)
        except StoreError:
            logger.exception("Error deleting envelope %s", envelope_id)
            self.events.notify('Error al eliminar el sobre. Por favor, intenta de nuevo.', 'error')
            raise
        logger.info("Deleted envelope %s", envelope_id)
        return removed

    def reconcile_spent(self) -> Dict[str, float]:
        """Recompute every envelope's ``spent`` from the expense log.

        Both collections are read inside the write transaction; a failed read
        raises :class:`StoreError` and nothing is written.

        Returns the envelopes whose stored figure changed, mapped to the new value.
        """
        changed: Dict[str, float] = {}
        try:
            with db.transaction() as batch:
                envelopes = [Envelope.from_document(d) for d in batch.fetch(BUDGET_ENVELOPES)]
                spent_by_envelope: Dict[str, float] = {}
                for doc in batch.fetch(BUDGET_TRANSACTIONS):
                    transaction = BudgetTransaction.from_document(doc)
                    if transaction.is_envelope_expense:
                        spent_by_envelope[transaction.envelope_id] = (
                            spent_by_envelope.get(transaction.envelope_id, 0.0) + transaction.amount
                        )
                for envelope in envelopes:
                    expected = spent_by_envelope.get(envelope.id, 0.0)
                    if abs(expected - envelope.spent) > 1e-9:
                        batch.update(BUDGET_ENVELOPES, envelope.id, {'spent': expected})
                        changed[envelope.id] = expected
        except StoreError:
            logger.exception("Error reconciling envelope spent totals")
            self.events.notify('No se pudo recalcular el presupuesto.', 'error')
            raise
        if changed:
            logger.warning("Reconciled spent totals for %d envelope(s)", len(changed))
        return changed
