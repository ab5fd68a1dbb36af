"""
Module: ledger_kernel.db.engine
Responsibility: Where the ledger's database connections come from.  Builds
    engines from a configured URL, keeps the process-wide session factory
    that ``build_ledger`` hands to the journal, and wraps each journal write
    in ``session_scope``.
Architecture position: Kernel > DB.  ``create_tables`` imports models/ so
    their tables are registered on ``Base.metadata``.

Invariants enforced:
    - Any SQLAlchemy URL is accepted; SQLite is what the CLI and tests use.
      ``sqlite://`` (in-memory) is pinned to a single shared connection,
      otherwise every new connection would see an empty database.
    - session_scope() commits on success, rolls back and re-raises on
      failure, and always closes the session.

Failure modes:
    - RuntimeError if the process-wide engine is used before
      init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Ledger database not initialized; call init_engine_from_url() first."


def build_engine(database_url: str, echo: bool = False) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)

    options: dict = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return create_engine(url, echo=echo, **options)


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Point the process at ``database_url``.

    Calling it again swaps in a new engine; the old one is only released by
    reset_engine().
    """
    global _engine, _SessionFactory

    _engine = build_engine(database_url, echo=echo)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory the journal opens one short session per write from."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    One database transaction, committed when the block exits cleanly.

    ``factory`` defaults to the process-wide one::

        with session_scope(journal_factory) as session:
            session.add(TransactionRow(...))
    """
    session = factory() if factory is not None else get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("journal_write_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create the ledger tables that are missing; existing ones are left alone."""
    from ledger_kernel.db.base import Base
    import ledger_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the process-wide engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
