# seed.py — loads a demo hotel with a few beds (idempotent)
# Usage: python seed.py
import logging

from sqlmodel import select

import db
from auth import ensure_admin
from models import Bed, Hotel

logger = logging.getLogger("seed")

sample_hotels = [
    {
        "name": "Harbour Hostel",
        "description": "Dorm rooms near the old port.",
        "beds": [("A1", "Dorm A / lower"), ("A2", "Dorm A / upper"),
                 ("B1", "Dorm B / lower"), ("B2", "Dorm B / upper")],
    },
    {
        "name": "Hillside Lodge",
        "description": "Quiet lodge with private beds.",
        "beds": [("1", "Room 1"), ("2", "Room 2")],
    },
]


def seed():
    db.init_db()
    with db.new_session() as session:
        ensure_admin(session)
        for data in sample_hotels:
            exists = session.exec(select(Hotel).where(Hotel.name == data["name"])).first()
            if exists:
                continue
            hotel = Hotel(name=data["name"], description=data["description"])
            session.add(hotel)
            session.flush()
            for number, position in data["beds"]:
                session.add(Bed(hotel_id=hotel.id, bed_number=number, position=position))
            logger.info("seeded hotel %r with %d beds", hotel.name, len(data["beds"]))
        session.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
