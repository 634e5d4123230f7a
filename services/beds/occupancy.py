# ============================================================
# occupancy.py — Bed occupancy ledger
# ------------------------------------------------------------
# Check-in and check-out, each as a single transaction over the
# "beds" and "customers" tables:
#   - open_stay  : lock the bed, require it available, insert
#                  the stay, mark the bed occupied
#   - close_stay : lock the active stay and its bed, stamp
#                  check_out, mark the bed available
# Bed.status mirrors "an active stay points at this bed". It is
# only ever written in the same transaction as the stay row, so
# readers see both changes or neither.
# ============================================================
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from config import Config
from db import LEDGER_WRITE
from models import BED_AVAILABLE, BED_OCCUPIED, Bed, GuestDetails, Stay

logger = logging.getLogger(__name__)


class OccupancyError(Exception):
    """Base class for check-in / check-out failures."""


class BedNotFound(OccupancyError):
    pass


class StayNotFound(OccupancyError):
    """No active stay with that id: it never existed or is already closed."""


class BedNotAvailable(OccupancyError):
    pass


class LedgerError(OccupancyError):
    """The store failed (lock timeout, constraint, commit, connection).

    The transaction has been rolled back. The message is generic and safe
    to show to clients; the cause is chained and logged.
    """


# ------------------------------------------------------------
# Locking helpers
# ------------------------------------------------------------
def _end_read_only_transaction(session: Session):
    # Touching an object expired by an earlier rollback autobegins a
    # transaction on the session. With nothing pending it only holds
    # reads, so it is safe to end before opening ours.
    if session.in_transaction() and not (session.new or session.dirty or session.deleted):
        session.rollback()


def _ledger_connection(session: Session, lock_timeout_ms: int):
    # Must be the first statement of the transaction: on SQLite the
    # option makes db.py begin with BEGIN IMMEDIATE, and the wait for
    # that lock is bounded by the engine's connect timeout, not by
    # lock_timeout_ms. On PostgreSQL lock_timeout_ms bounds each row
    # lock wait of this transaction.
    conn = session.connection(execution_options={LEDGER_WRITE: True})
    if conn.dialect.name == "postgresql":
        conn.execute(
            text("SELECT set_config('lock_timeout', :v, true)"),
            {"v": f"{int(lock_timeout_ms)}ms"},
        )


def _lock_bed(session: Session, bed_id: int) -> Optional[Bed]:
    stmt = (
        select(Bed)
        .where(Bed.id == bed_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return session.exec(stmt).first()


def _lock_active_stay(session: Session, stay_id: int) -> Optional[Stay]:
    # the lock and the "still open" predicate are evaluated together
    stmt = (
        select(Stay)
        .where(Stay.id == stay_id, Stay.check_out == None)  # noqa: E711
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return session.exec(stmt).first()


def _insert_stay(session: Session, bed: Bed, guest: GuestDetails) -> Stay:
    stay = Stay(**guest.model_dump(), bed_id=bed.id, check_out=None)
    session.add(stay)
    session.flush()
    return stay


def _set_bed_status(session: Session, bed: Bed, status: str):
    bed.status = status
    session.add(bed)
    session.flush()


# ------------------------------------------------------------
# Check-in
# ------------------------------------------------------------
def open_stay(session: Session, bed_id: int, guest: GuestDetails,
              lock_timeout_ms: int = Config.LOCK_TIMEOUT_MS) -> Stay:
    """Claim ``bed_id`` for ``guest`` and return the new active stay.

    This function owns the transaction and commits or rolls it back
    before returning. A transaction already open on the session is ended
    first if it only holds reads; one with pending writes is a caller
    error and surfaces as LedgerError. Of several concurrent calls on the
    same bed, the first to get the row lock wins and the others see the
    bed occupied.

    ``lock_timeout_ms`` bounds row lock waits on PostgreSQL. On SQLite
    the wait is bounded by the timeout given to db.make_engine.

    Raises BedNotFound, BedNotAvailable or LedgerError.
    """
    _end_read_only_transaction(session)
    try:
        with session.begin():
            _ledger_connection(session, lock_timeout_ms)
            bed = _lock_bed(session, bed_id)
            if bed is None:
                raise BedNotFound(f"bed {bed_id} not found")
            if bed.status != BED_AVAILABLE:
                raise BedNotAvailable(f"bed {bed_id} is not available")

            stay = _insert_stay(session, bed, guest)
            _set_bed_status(session, bed, BED_OCCUPIED)
    except OccupancyError as e:
        logger.warning("[stays] check-in on bed %s rejected: %s", bed_id, e)
        raise
    except SQLAlchemyError as e:
        logger.exception("[stays] check-in on bed %s failed, rolled back", bed_id)
        raise LedgerError("failed to check in customer") from e

    logger.info("[stays] opened stay %s on bed %s", stay.id, bed_id)
    return stay


# ------------------------------------------------------------
# Check-out
# ------------------------------------------------------------
def close_stay(session: Session, stay_id: int,
               lock_timeout_ms: int = Config.LOCK_TIMEOUT_MS) -> Stay:
    """Close the active stay ``stay_id`` and release its bed.

    Same session and lock timeout rules as open_stay. Closing twice is
    safe: the second call finds no active stay and raises StayNotFound,
    so the bed is never released on behalf of a stay that was already
    closed.

    Raises StayNotFound or LedgerError.
    """
    _end_read_only_transaction(session)
    try:
        with session.begin():
            _ledger_connection(session, lock_timeout_ms)
            stay = _lock_active_stay(session, stay_id)
            if stay is None:
                raise StayNotFound(f"customer {stay_id} not found or already checked out")

            bed = _lock_bed(session, stay.bed_id)
            if bed is None:
                logger.error("[stays] stay %s references missing bed %s", stay_id, stay.bed_id)
                raise LedgerError("failed to check out customer")
            if bed.status != BED_OCCUPIED:
                logger.warning("[stays] bed %s was %r under active stay %s", bed.id, bed.status, stay_id)

            stay.check_out = datetime.now(timezone.utc)
            session.add(stay)
            session.flush()
            _set_bed_status(session, bed, BED_AVAILABLE)
    except OccupancyError as e:
        logger.warning("[stays] check-out of %s rejected: %s", stay_id, e)
        raise
    except SQLAlchemyError as e:
        logger.exception("[stays] check-out of %s failed, rolled back", stay_id)
        raise LedgerError("failed to check out customer") from e

    logger.info("[stays] closed stay %s, bed %s available", stay_id, stay.bed_id)
    return stay
