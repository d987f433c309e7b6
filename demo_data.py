"""Sample cinemas and a demo user so local runs have usable data."""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from errors import ConflictError
from inventory_store import LedgerStore, TheatreStore
from models import ShowDate, ShowTime, Theatre

logger = logging.getLogger(__name__)

DATE_FORMAT = '%d-%m-%Y'
DEMO_USER_EMAIL = 'demo@bookit.local'

Showing = Tuple[str, str, Sequence[str]]  # (time, movie, booked seats)


def format_show_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def seat_block(rows: str, per_row: int, limit: Optional[int] = None) -> List[str]:
    """Seat codes row by row, e.g. A1..A20, B1..B20, truncated to ``limit``."""
    codes = [f"{row}{num}" for row in rows for num in range(1, per_row + 1)]
    return codes[:limit] if limit is not None else codes


def build_theatre(name: str, address: str, distance: str, location: str,
                  schedule: Dict[str, List[Showing]]) -> Theatre:
    return Theatre(
        name=name,
        address=address,
        distance=distance,
        location=location,
        is_full=False,
        is_empty=False,
        dates=[
            ShowDate(
                date=show_date,
                seats=[],
                show_times=[
                    ShowTime(time=time, movie_name=movie, booked_seats=list(seats))
                    for time, movie, seats in showings
                ],
            )
            for show_date, showings in schedule.items()
        ],
    )


def demo_theatres(today: Optional[date] = None) -> List[Theatre]:
    today = today or date.today()
    first = format_show_date(today)
    second = format_show_date(today + timedelta(days=1))

    return [
        build_theatre("PVR Cinemas", "Select Citywalk Mall, Saket", "5 km", "Delhi-NCR", {
            first: [
                ("18:00", "Inception", ["A1", "A2", "B5", "C7", "D4", "E10", "F2", "G8"]),
                ("21:30", "Interstellar", ["B3", "B4", "C1", "C2", "D5", "D6", "E7", "E8", "F1"]),
            ],
            second: [
                ("14:30", "Inception", ["A5", "B6", "C3"]),
                ("18:00", "Interstellar", ["D2", "E3", "F4"]),
            ],
        }),
        build_theatre("INOX", "R-City Mall, Ghatkopar", "3 km", "Mumbai", {
            first: [
                ("15:00", "Dune", ["A3", "A4", "B1", "B2", "C8", "D9", "E5", "F7", "G2", "G3"]),
                ("19:15", "No Time To Die", ["B7", "B8", "C4", "C5", "D1", "D2", "E9", "F10"]),
            ],
        }),
        build_theatre("Cinepolis", "Orion Mall, Malleshwaram", "8 km", "Bangalore", {
            first: [
                ("14:30", "Black Widow", ["A6", "A7", "B9", "B10", "C3", "C4", "D8", "E2", "F5", "G1"]),
                # Nearly sold out: 190 of the 200 seats in rows A-J
                ("20:00", "Shang-Chi", seat_block("ABCDEFGHIJ", 20, limit=190)),
            ],
        }),
    ]


def initialize_demo_data(theatres: TheatreStore, ledger: LedgerStore) -> bool:
    """Seed the sample cinemas and demo user when the inventory is empty."""
    if theatres.count_theatres() > 0:
        logger.info("ℹ️ Inventory already populated, skipping demo data")
        return False

    added = theatres.add_theatres(demo_theatres())
    try:
        ledger.add_user(DEMO_USER_EMAIL, first_name="Demo", last_name="User")
    except ConflictError:
        logger.info(f"Demo user already exists: {DEMO_USER_EMAIL}")

    logger.info(f"✅ Seeded {added} demo theatres")
    return True
