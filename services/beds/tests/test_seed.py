from sqlmodel import select

import db
import seed
from auth import authenticate, ensure_admin
from config import Config
from models import Bed, Hotel, User
from repository import UserRepository


def test_seed_is_idempotent(engine):
    seed.seed()
    seed.seed()
    with db.new_session() as s:
        hotels = s.exec(select(Hotel)).all()
        assert sorted(h.name for h in hotels) == ["Harbour Hostel", "Hillside Lodge"]
        beds = s.exec(select(Bed)).all()
        assert len(beds) == 6
        assert {b.status for b in beds} == {"available"}
        assert authenticate(s, Config.ADMIN_USERNAME, Config.ADMIN_PASSWORD) is not None
        assert authenticate(s, Config.ADMIN_USERNAME, "nope") is None


def test_admin_seed_tolerates_a_concurrent_start(engine, monkeypatch):
    with db.new_session() as s:
        ensure_admin(s)

    # a second worker that counted users before the first one committed
    with monkeypatch.context() as m:
        m.setattr(UserRepository, "count", lambda self: 0)
        with db.new_session() as s:
            ensure_admin(s)

    with db.new_session() as s:
        users = s.exec(select(User)).all()
    assert [u.username for u in users] == [Config.ADMIN_USERNAME]
