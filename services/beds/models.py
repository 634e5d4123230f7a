# ============================================================
# models.py — SQLModel data models (Bed Occupancy Service)
# ------------------------------------------------------------
# Tables:
#   1. Hotel : a property listed in the catalog
#   2. Bed   : the unit of occupancy, owned by a hotel
#   3. Stay  : one guest on one bed (table "customers")
#   4. User  : staff account allowed to use the API
# Plus the request/response shapes used by the routers.
# ============================================================
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

# Bed.status values. "occupied" iff an active stay references the bed.
BED_AVAILABLE = "available"
BED_OCCUPIED = "occupied"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Hotel(SQLModel, table=True):
    __tablename__ = "hotels"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class BedBase(SQLModel):
    hotel_id: int = Field(foreign_key="hotels.id", index=True)
    bed_number: str
    position: str = ""
    status: str = BED_AVAILABLE         # available | occupied


class Bed(BedBase, table=True):
    __tablename__ = "beds"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow)


# ------------------------------------------------------------
# Stay
# ------------------------------------------------------------
# Guest details captured at check-in. check_out stays NULL while
# the guest is on the bed and is stamped exactly once at
# check-out; a stay is never reopened or deleted.
# ------------------------------------------------------------
class GuestDetails(SQLModel):
    full_name: str = Field(min_length=1)
    mobile_number: str = Field(min_length=1)
    check_in: datetime
    expected_check_out: Optional[datetime] = None   # planned departure, informational
    amount_paid: float = Field(ge=0)
    payment_mode: str = Field(min_length=1)


class Stay(GuestDetails, table=True):
    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
    bed_id: int = Field(foreign_key="beds.id", index=True)
    check_out: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    password_hash: str
    role: str = "staff"
    created_at: datetime = Field(default_factory=utcnow)


# ------------------------------------------------------------
# API payloads
# ------------------------------------------------------------
class CheckInRequest(GuestDetails):
    bed_id: int
    # Older clients send the planned departure as "check_out".
    check_out: Optional[datetime] = None

    def guest(self) -> GuestDetails:
        data = self.model_dump(exclude={"bed_id", "check_out"})
        if data["expected_check_out"] is None:
            data["expected_check_out"] = self.check_out
        return GuestDetails(**data)


class CheckoutRequest(SQLModel):
    customer_id: int


class StayOut(GuestDetails):
    id: int
    bed_id: int
    check_out: Optional[datetime] = None
    created_at: datetime


class BedOut(BedBase):
    id: int
    created_at: datetime
    customer: Optional[StayOut] = None


class LoginRequest(SQLModel):
    username: str
    password: str


class UserOut(SQLModel):
    id: int
    username: str
    role: str
    created_at: datetime


class LoginResponse(SQLModel):
    token: str
    user: UserOut
