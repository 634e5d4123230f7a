"""
Test configuration for pytest.
Puts the service directory on sys.path and gives every test its own
SQLite database file.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

service_dir = str(Path(__file__).parent.parent)
if service_dir not in sys.path:
    sys.path.insert(0, service_dir)

import db  # noqa: E402
from models import Bed, GuestDetails, Hotel  # noqa: E402


@pytest.fixture
def engine(tmp_path, monkeypatch):
    """Fresh database; db.new_session/get_session are pointed at it."""
    eng = db.make_engine(f"sqlite:///{tmp_path / 'beds.db'}")
    monkeypatch.setattr(db, "engine", eng)
    db.init_db()
    yield eng
    eng.dispose()


@pytest.fixture
def beds(engine):
    """One hotel with five beds; ids are 1..5 on a fresh database."""
    with db.new_session() as s:
        hotel = Hotel(name="Harbour Hostel", description="test")
        s.add(hotel)
        s.flush()
        rows = [Bed(hotel_id=hotel.id, bed_number=str(n), position=f"Dorm / {n}") for n in range(1, 6)]
        s.add_all(rows)
        s.commit()
        return rows


def make_guest(name: str = "Alice", **overrides) -> GuestDetails:
    data = dict(
        full_name=name,
        mobile_number="+15550100",
        check_in=datetime(2026, 10, 1, 14, 0, tzinfo=timezone.utc),
        amount_paid=40.0,
        payment_mode="cash",
    )
    data.update(overrides)
    return GuestDetails(**data)


@pytest.fixture
def guest():
    return make_guest
