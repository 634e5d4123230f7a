# ============================================================
# Hotels & Customers API Router
# ------------------------------------------------------------
# REST endpoints for listing hotels and their beds, and for
# checking customers in and out. Every route here needs a valid
# bearer token (see auth.py).
# ============================================================

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from auth import get_current_user
from db import get_session
from models import BedOut, CheckInRequest, CheckoutRequest, Hotel, StayOut
from occupancy import BedNotAvailable, BedNotFound, LedgerError, StayNotFound, close_stay, open_stay
from repository import CatalogRepository


router = APIRouter(prefix="/api", dependencies=[Depends(get_current_user)])


@router.get("/hotels", response_model=list[Hotel])
def list_hotels(s: Session = Depends(get_session)):
    return CatalogRepository(s).list_hotels()


# ------------------------------------------------------------
# GET /api/hotels/{hotel_id}/beds
# ------------------------------------------------------------
# Beds ordered by position then number, each with the guest
# currently on it (customer = null when the bed is free).
# An unknown hotel simply has no beds.
# ------------------------------------------------------------
@router.get("/hotels/{hotel_id}/beds", response_model=list[BedOut])
def list_beds(hotel_id: int, s: Session = Depends(get_session)):
    beds = []
    for bed, stay in CatalogRepository(s).list_beds(hotel_id):
        out = BedOut.model_validate(bed)
        if stay is not None:
            out.customer = StayOut.model_validate(stay)
        beds.append(out)
    return beds


# ------------------------------------------------------------
# POST /api/customers — Check-in
# ------------------------------------------------------------
# 404 unknown bed, 409 bed already occupied, 500 store failure
# (details stay in the logs).
# ------------------------------------------------------------
@router.post("/customers", status_code=201)
def check_in(req: CheckInRequest, s: Session = Depends(get_session)):
    try:
        stay = open_stay(s, req.bed_id, req.guest())
    except BedNotFound:
        raise HTTPException(404, "Bed not found")
    except BedNotAvailable:
        raise HTTPException(409, "Bed is not available")
    except LedgerError:
        raise HTTPException(500, "Failed to check in customer")
    return {"id": stay.id}


# ------------------------------------------------------------
# POST /api/customers/checkout — Check-out
# ------------------------------------------------------------
@router.post("/customers/checkout")
def check_out(req: CheckoutRequest, s: Session = Depends(get_session)):
    try:
        close_stay(s, req.customer_id)
    except StayNotFound:
        raise HTTPException(404, "Customer not found or already checked out")
    except LedgerError:
        raise HTTPException(500, "Failed to check out customer")
    return {"message": "Customer checked out successfully"}
