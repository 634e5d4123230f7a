# ============================================================
# repository.py — Read access to the catalog and staff accounts
# ------------------------------------------------------------
# Repository pattern over the hotels/beds/customers and users
# tables. Writes to beds and customers do NOT go through here:
# they belong to the occupancy ledger (occupancy.py).
# ============================================================
from typing import List, Optional, Tuple

from sqlalchemy import and_, func
from sqlmodel import Session, select

from models import Bed, Hotel, Stay, User


# CatalogRepository
# Hotels, and beds of a hotel each joined with its active stay (if any).
class CatalogRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_hotels(self) -> List[Hotel]:
        return list(self.session.exec(select(Hotel).order_by(Hotel.id)).all())

    def list_beds(self, hotel_id: int) -> List[Tuple[Bed, Optional[Stay]]]:
        stmt = (
            select(Bed, Stay)
            .join(Stay, and_(Stay.bed_id == Bed.id, Stay.check_out == None), isouter=True)  # noqa: E711
            .where(Bed.hotel_id == hotel_id)
            .order_by(Bed.position, Bed.bed_number)
        )
        return list(self.session.exec(stmt).all())


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, u: User):
        self.session.add(u)
        self.session.commit()
        self.session.refresh(u)
        return u

    def get_by_username(self, username: str):
        return self.session.exec(select(User).where(User.username == username)).first()

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(User)).one()
