#!/usr/bin/env python3
"""Fill the document store with demo contracts, installments and a budget."""

from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from studio_dashboard import db
from studio_dashboard.config import (
    BUDGET_ENVELOPES,
    BUDGET_TRANSACTIONS,
    CONTRACTS,
    INVESTMENT_INSTALLMENTS,
    PRODUCTS,
)
from studio_dashboard.logging_config import setup_logging

CLIENTS = ['Ana Souza', 'Bruno Lima', 'Carla Mendes', 'Diego Rocha', 'Elisa Costa', 'Felipe Alves']
DEMO_DRESS_ID = 'demo-vestido-rojo'


def demo_contracts(today: date):
    for index, client in enumerate(CLIENTS):
        event_day = today + timedelta(days=(index - 2) * 9)
        done = event_day < today
        yield {
            'clientName': client,
            'phone': f'(11) 9{index}123-45{index}{index}',
            'eventType': 'Casamento' if index % 2 == 0 else 'Ensaio',
            'eventDate': event_day.isoformat(),
            'eventTime': f'{9 + index}:00',
            'eventLocation': 'São Paulo',
            'contractDate': (event_day - timedelta(days=30)).isoformat(),
            'createdAt': (event_day - timedelta(days=30)).isoformat(),
            'services': [{'name': 'Cobertura', 'price': f'R$ {1000 + index * 250}', 'quantity': 1, 'duration': '4h'}],
            'storeItems': [{'name': 'Álbum', 'price': 150, 'quantity': 1}] if index % 3 == 0 else [],
            'travelFee': 100 if index % 2 else 0,
            'depositPaid': True,
            'finalPaymentPaid': done,
            'eventCompleted': done,
            'paymentMethod': 'pix',
            'formSnapshot': {'selectedDresses': [DEMO_DRESS_ID]} if index == 0 else {},
        }


def main(reset: bool = False) -> None:
    setup_logging()
    db.init_db()
    collections = (CONTRACTS, INVESTMENT_INSTALLMENTS, BUDGET_ENVELOPES, BUDGET_TRANSACTIONS, PRODUCTS, 'bookingRequests')
    if reset:
        for name in collections:
            removed = db.clear_collection(name)
            print(f"Cleared {removed} document(s) from {name}")

    today = date.today()
    with db.transaction() as batch:
        for contract in demo_contracts(today):
            batch.add(CONTRACTS, contract)
        for offset in range(3):
            batch.add(INVESTMENT_INSTALLMENTS, {
                'dueDate': (today.replace(day=1) + timedelta(days=31 * offset)).isoformat(),
                'amount': 350,
                'description': f'Lente - cuota {offset + 1}/3',
            })
        gear = batch.add(BUDGET_ENVELOPES, {'name': 'Equipo', 'percentage': 40, 'allocated': 1000, 'spent': 0})
        batch.add(BUDGET_ENVELOPES, {'name': 'Marketing', 'percentage': 20, 'allocated': 500, 'spent': 0})
        batch.add(BUDGET_TRANSACTIONS, {
            'date': today.isoformat(), 'description': 'Ingreso', 'category': 'Ingresos',
            'type': 'income', 'amount': 2500,
        })
        batch.add(BUDGET_TRANSACTIONS, {
            'date': today.isoformat(), 'description': 'Baterías', 'category': 'Equipo',
            'type': 'expense', 'amount': 120, 'envelopeId': gear,
        })
        batch.update(BUDGET_ENVELOPES, gear, {'spent': 120})
        batch.set(PRODUCTS, DEMO_DRESS_ID, {'name': 'Vestido rojo', 'category': 'Vestidos', 'tags': ['rojo']})
        # booking without a contract yet, picked up by "Sincronizar reservas"
        batch.add('bookingRequests', {
            'clientName': 'Gabriela Nunes', 'eventDate': (today + timedelta(days=20)).isoformat(),
            'eventTime': '16:00', 'eventType': 'Ensaio', 'phone': '(11) 98888-7777',
        })
    print(f"Seeded demo data into {db.DB_PATH}")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Seed the store with demo data.')
    parser.add_argument('--reset', action='store_true', help='Clear the demo collections first')
    args = parser.parse_args()
    main(reset=args.reset)
