# ============================================================
# db.py — Engine and sessions
# ------------------------------------------------------------
# One engine per process. Each request gets its own Session
# through the get_session dependency.
#
# SQLite has no row locks. Ledger transactions (check-in and
# check-out) ask for the LEDGER_WRITE connection option and are
# opened with BEGIN IMMEDIATE, so the database write lock is held
# from the first statement: the same exclusion as
# SELECT ... FOR UPDATE on PostgreSQL, coarser (whole file).
# Everything else begins normally, and WAL journaling keeps those
# readers from blocking ledger commits.
# ============================================================
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401  (registers the tables on SQLModel.metadata)
from config import Config

LEDGER_WRITE = "ledger_write"


def make_engine(url: str, lock_timeout_ms: int = Config.LOCK_TIMEOUT_MS):
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": lock_timeout_ms / 1000},
    )

    @event.listens_for(engine, "connect")
    def _sqlite_setup(dbapi_connection, connection_record):
        # we emit BEGIN ourselves below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn):
        if conn.get_execution_options().get(LEDGER_WRITE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


engine = make_engine(Config.DATABASE_URL)


def init_db():
    SQLModel.metadata.create_all(engine)


# Objects stay readable after commit; the ledger functions open
# and close their own transaction on the session.
def new_session() -> Session:
    return Session(engine, expire_on_commit=False)


# FastAPI dependency: one Session per request, always closed
def get_session():
    with new_session() as s:
        yield s
