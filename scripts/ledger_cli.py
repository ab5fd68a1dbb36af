#!/usr/bin/env python3
"""
Command-line front end to a SQLite-backed ledger.

Every command goes through the same API facade a UI would use, so the
output is the JSON body of the response.  The exit status is 0 for 2xx
responses and 1 otherwise.

Usage:
  python3 scripts/ledger_cli.py --db sqlite:///ledger.db add \\
      --module Inventory --type Expense --category Equipment \\
      --description "Projector" --amount 150000 --payment-method Cash \\
      --reference INV-001 --created-by "Inventory Manager"
  python3 scripts/ledger_cli.py pending
  python3 scripts/ledger_cli.py approve FTX004 --by "Finance Manager"
  python3 scripts/ledger_cli.py reject FTX005 --by "Finance Manager" \\
      --reason "insufficient documentation"
  python3 scripts/ledger_cli.py offering --service-type "Sunday Service" \\
      --minister "Pastor John" --collected-by "Usher Team" --tithe 45000
  python3 scripts/ledger_cli.py summary --from 2024-01-01 --to 2024-01-31
  python3 scripts/ledger_cli.py history FTX004
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace

from ledger_config import get_active_config
from ledger_kernel.exceptions import ConfigurationError
from ledger_kernel.logging_config import configure_logging
from ledger_services.api import ApiResponse
from ledger_services.bootstrap import Ledger, build_ledger

DEFAULT_DB_URL = "sqlite:///ledger.db"


def _print(response: ApiResponse) -> int:
    print(json.dumps(response.body, indent=2))
    return 0 if response.ok else 1


def cmd_add(ledger: Ledger, args: argparse.Namespace) -> int:
    body = {
        "date": args.date or ledger.clock.today().isoformat(),
        "type": args.type,
        "category": args.category,
        "subcategory": args.subcategory,
        "description": args.description,
        "amount": args.amount,
        "currency": ledger.config.currency,
        "paymentMethod": args.payment_method,
        "reference": args.reference,
        "module": args.module,
        "moduleReference": args.module_reference,
        "createdBy": args.created_by,
        "notes": args.notes,
    }
    return _print(ledger.api.post_transaction(body))


def cmd_list(ledger: Ledger, args: argparse.Namespace) -> int:
    return _print(
        ledger.api.list_transactions(
            module=args.module, type=args.type, from_=args.from_, to=args.to
        )
    )


def cmd_pending(ledger: Ledger, args: argparse.Namespace) -> int:
    return _print(ledger.api.list_pending())


def cmd_approve(ledger: Ledger, args: argparse.Namespace) -> int:
    approver = args.by or ledger.config.default_approver
    return _print(ledger.api.approve(args.transaction_id, {"approvedBy": approver}))


def cmd_reject(ledger: Ledger, args: argparse.Namespace) -> int:
    rejecter = args.by or ledger.config.default_approver
    return _print(
        ledger.api.reject(
            args.transaction_id, {"rejectedBy": rejecter, "reason": args.reason}
        )
    )


_BUCKETS = (
    "tithe",
    "special_offering",
    "thanksgiving",
    "building_fund",
    "missions",
    "welfare",
    "youth",
    "others",
)


def cmd_offering(ledger: Ledger, args: argparse.Namespace) -> int:
    offerings = {}
    for bucket in _BUCKETS:
        value = getattr(args, bucket)
        if value is not None:
            head, *rest = bucket.split("_")
            offerings[head + "".join(p.title() for p in rest)] = value
    body = {
        "date": args.date or ledger.clock.today().isoformat(),
        "serviceType": args.service_type,
        "minister": args.minister,
        "offerings": offerings,
        "collectedBy": args.collected_by,
        "countedBy": args.counted_by or [],
    }
    return _print(ledger.api.post_offering(body))


def cmd_summary(ledger: Ledger, args: argparse.Namespace) -> int:
    return _print(ledger.api.summary(from_=args.from_, to=args.to))


def cmd_history(ledger: Ledger, args: argparse.Namespace) -> int:
    if ledger.journal is None:
        print("history needs a database", file=sys.stderr)
        return 1
    for entry in ledger.journal.history(args.transaction_id):
        print(
            f"{entry.seq:>5}  {entry.occurred_at.isoformat()}  "
            f"{entry.transaction_id:<8} {entry.action.value:<15} "
            f"{entry.from_status.value if entry.from_status else '-':>9} -> "
            f"{entry.to_status.value if entry.to_status else '-':<9} "
            f"{entry.actor or ''}"
            + (f"  ({entry.note})" if entry.note else "")
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Church ledger: record, review and summarize transactions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", help="YAML file overriding the packaged defaults")
    parser.add_argument(
        "--db",
        help=f"SQLAlchemy URL of the ledger database (default: config, else {DEFAULT_DB_URL})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Record a transaction")
    add.add_argument("--date", help="ISO date (default: today)")
    add.add_argument("--type", required=True, choices=["Income", "Expense"])
    add.add_argument("--category", required=True)
    add.add_argument("--subcategory")
    add.add_argument("--description", required=True)
    add.add_argument("--amount", required=True)
    add.add_argument("--payment-method", required=True)
    add.add_argument("--reference", required=True)
    add.add_argument("--module", default="Finance")
    add.add_argument("--module-reference")
    add.add_argument("--created-by", required=True)
    add.add_argument("--notes")
    add.set_defaults(func=cmd_add)

    lst = sub.add_parser("list", help="List transactions")
    lst.add_argument("--module")
    lst.add_argument("--type")
    lst.add_argument("--from", dest="from_")
    lst.add_argument("--to")
    lst.set_defaults(func=cmd_list)

    pending = sub.add_parser("pending", help="List the approval queue")
    pending.set_defaults(func=cmd_pending)

    approve = sub.add_parser("approve", help="Approve a pending transaction")
    approve.add_argument("transaction_id")
    approve.add_argument("--by", help="Approver (default: config default_approver)")
    approve.set_defaults(func=cmd_approve)

    reject = sub.add_parser("reject", help="Reject a pending transaction")
    reject.add_argument("transaction_id")
    reject.add_argument("--by", help="Reviewer (default: config default_approver)")
    reject.add_argument("--reason", default="")
    reject.set_defaults(func=cmd_reject)

    offering = sub.add_parser("offering", help="Record a service offering")
    offering.add_argument("--date", help="ISO date (default: today)")
    offering.add_argument("--service-type", required=True)
    offering.add_argument("--minister", required=True)
    offering.add_argument("--collected-by", required=True)
    offering.add_argument("--counted-by", action="append")
    for bucket in _BUCKETS:
        offering.add_argument(f"--{bucket.replace('_', '-')}", dest=bucket)
    offering.set_defaults(func=cmd_offering)

    summary = sub.add_parser("summary", help="Income, expenses and offerings")
    summary.add_argument("--from", dest="from_")
    summary.add_argument("--to")
    summary.set_defaults(func=cmd_summary)

    history = sub.add_parser("history", help="Status history from the journal")
    history.add_argument("transaction_id", nargs="?")
    history.set_defaults(func=cmd_history)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = get_active_config(args.config)
    except ConfigurationError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 2
    config = replace(config, database_url=args.db or config.database_url or DEFAULT_DB_URL)
    configure_logging(level=config.log_level)

    ledger = build_ledger(config)
    return args.func(ledger, args)


if __name__ == "__main__":
    sys.exit(main())
