"""
Module: ledger_kernel.db.base
Responsibility: Declarative base for the ledger's ORM models, with the type
    annotation map that fixes column types across the schema.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from models/, services/, domain/ or outer layers.

Invariants enforced:
    - Decimal precision: ``Decimal`` maps to Numeric(38, 9).  Money is never
      stored as a float column.
    - Timestamps: ``datetime`` maps to DateTime(timezone=True).
    - Sequences: ``int`` maps to BigInteger; the status-history seq
      narrows to INTEGER on SQLite so it stays the rowid alias.

Unlike most ORMs' surrogate-key convention, ledger rows keep their business
ids (``FTX001``, ``OFF001``) as primary keys, so models declare their own.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import BigInteger, Date, DateTime, Numeric
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ledger models."""

    type_annotation_map: ClassVar[dict] = {
        # Financial precision: 38 digits total, 9 decimal places
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        int: BigInteger,
    }
