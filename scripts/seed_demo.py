#!/usr/bin/env python3
"""
Seed a ledger database with a small, realistic month of church finances.

Records a Sunday tithe collection, a laptop purchase from the inventory
office (which goes through approval and is then completed), the monthly
electricity bill paid by mobile money, and one counted service offering.
Refuses to run against a database that already holds transactions.

Usage:
  python3 scripts/seed_demo.py                         # sqlite:///ledger.db
  python3 scripts/seed_demo.py --db sqlite:///demo.db
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from datetime import date
from decimal import Decimal

from ledger_config import get_active_config
from ledger_kernel.domain.offering import BankingDetails, OfferingBreakdown, OfferingDraft
from ledger_kernel.domain.transaction import (
    Module,
    PaymentMethod,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)
from ledger_kernel.logging_config import configure_logging
from ledger_modules.inventory import inventory_purchase
from ledger_services.bootstrap import build_ledger

DEFAULT_DB_URL = "sqlite:///ledger.db"
APPROVER = "Pastor"


def seed(ledger) -> None:
    store = ledger.store

    store.add_transaction(TransactionDraft(
        date=date(2024, 1, 15),
        type=TransactionType.INCOME,
        category="Tithe",
        description="Sunday Service Tithe Collection",
        amount=Decimal("250000"),
        payment_method=PaymentMethod.CASH,
        reference="REF001",
        module=Module.FINANCE,
        created_by="Finance Officer",
    ))

    laptops = store.add_transaction(inventory_purchase(
        item_name="laptops for church office",
        purchase_price=150000,
        supplier="Office Mart",
        category="Office Supplies",
        payment_method_used=PaymentMethod.BANK_TRANSFER,
        reference="INV001",
        created_by="Inventory Manager",
        on=date(2024, 1, 16),
    ))
    store.approve_transaction(laptops.id, APPROVER)
    store.update_transaction_status(laptops.id, TransactionStatus.COMPLETED)

    store.add_transaction(TransactionDraft(
        date=date(2024, 1, 17),
        type=TransactionType.EXPENSE,
        category="Utilities",
        description="Monthly electricity bill",
        amount=Decimal("45000"),
        payment_method=PaymentMethod.MOBILE_MONEY,
        reference="ELEC001",
        external_payment_reference="RKL9A2B3C4",
        module=Module.FINANCE,
        created_by="Finance Officer",
    ))

    store.add_offering(OfferingDraft(
        date=date(2024, 1, 21),
        service_type="Sunday Service",
        minister="Pastor James Kimani",
        offerings=OfferingBreakdown(
            tithe=Decimal("180000"),
            special_offering=Decimal("45000"),
            thanksgiving=Decimal("25000"),
            building_fund=Decimal("75000"),
            missions=Decimal("30000"),
            welfare=Decimal("20000"),
            youth=Decimal("15000"),
            others=Decimal("10000"),
        ),
        collected_by="Deacon Peter",
        counted_by=("Grace Mwangi", "Samuel Kiprotich"),
        banking_details=BankingDetails(
            deposited=True,
            deposit_date=date(2024, 1, 22),
            bank_slip_number="BS2024001",
        ),
    ))


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a ledger database with demo data.")
    parser.add_argument("--config", help="YAML file overriding the packaged defaults")
    parser.add_argument("--db", help=f"SQLAlchemy URL (default: config, else {DEFAULT_DB_URL})")
    args = parser.parse_args()

    config = get_active_config(args.config)
    config = replace(config, database_url=args.db or config.database_url or DEFAULT_DB_URL)
    configure_logging(level=config.log_level)

    ledger = build_ledger(config)
    if ledger.store.get_transactions():
        print(f"  {config.database_url} already holds transactions; not seeding.")
        return 1

    seed(ledger)

    summary = ledger.store.get_financial_summary()
    print(f"  Seeded {summary.transaction_count} transactions into {config.database_url}")
    print(f"  Income:    {config.currency} {summary.total_income:>12,}")
    print(f"  Expenses:  {config.currency} {summary.total_expenses:>12,}")
    print(f"  Net:       {config.currency} {summary.net_income:>12,}")
    print(f"  Offerings: {config.currency} {summary.offering_total:>12,}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
