"""Seat query and reservation services.

Services:
- Depend only on the TheatreStore interface
- Receive already-validated request records (see schemas.py)
- Treat a missing theatre, date or showtime as "nothing booked yet"
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from errors import ValidationError
from inventory_store import TheatreStore
from models import DEFAULT_DISTANCE, ShowDate, ShowTime, Theatre
from schemas import SeatReservationRequest, ShowKey

logger = logging.getLogger(__name__)


def find_date_entry(theatre: Theatre, date: str) -> Optional[ShowDate]:
    return next((entry for entry in theatre.dates if entry.date == date), None)


def find_show_time(date_entry: ShowDate, show_time: str, movie_name: str) -> Optional[ShowTime]:
    return next(
        (
            entry for entry in date_entry.show_times
            if entry.time == show_time and entry.movie_name == movie_name
        ),
        None,
    )


def lookup_show_time(theatre: Optional[Theatre], key: ShowKey) -> Optional[ShowTime]:
    """Walk theatre -> date -> showtime; None as soon as a level is missing."""
    if theatre is None:
        return None
    date_entry = find_date_entry(theatre, key.date)
    if date_entry is None:
        return None
    return find_show_time(date_entry, key.show_time, key.movie_name)


def ensure_show_time(theatre: Theatre, date: str, show_time: str, movie_name: str) -> ShowTime:
    """Return the showtime entry for the key, creating the date and showtime on demand.

    At most one date entry per date and one showtime entry per
    (time, movie) exist under a theatre; this is the only place that
    creates them.
    """
    date_entry = find_date_entry(theatre, date)
    if date_entry is None:
        date_entry = ShowDate(date=date, seats=[], show_times=[])
        theatre.dates.append(date_entry)

    entry = find_show_time(date_entry, show_time, movie_name)
    if entry is None:
        entry = ShowTime(time=show_time, movie_name=movie_name, booked_seats=[])
        date_entry.show_times.append(entry)
    return entry


def merge_seats(entry: ShowTime, seat_codes: Iterable[str]) -> List[str]:
    """Union ``seat_codes`` into the entry's booked seats, keeping first-seen order."""
    merged = list(entry.booked_seats or [])
    for seat in seat_codes:
        if seat not in merged:
            merged.append(seat)
    entry.booked_seats = merged
    return merged


class SeatQueryService:
    """Read-side seat availability lookups."""

    def __init__(self, store: TheatreStore) -> None:
        self._store = store

    def get_booked_seats(self, key: ShowKey) -> List[str]:
        """Return booked seat codes; empty when nothing was ever booked for the key."""
        entry = lookup_show_time(self._store.find_theatre(key.theatre_name), key)
        if entry is None:
            return []
        return list(entry.booked_seats or [])

    def get_booked_seats_count(self, key: ShowKey) -> int:
        return len(self.get_booked_seats(key))

    def verify_cinema_name(self, name: str) -> Tuple[bool, Optional[Theatre]]:
        # names are stored trimmed
        theatre = self._store.find_theatre(name.strip())
        return theatre is not None, theatre

    def list_cinemas(self, location: Optional[str] = None) -> List[Theatre]:
        return self._store.list_theatres(location)

    def theatres_for_date(self, date: str) -> List[Dict[str, Any]]:
        """Every theatre with its dates narrowed to ``date``.

        Theatres without an entry for that date report one empty entry.
        """
        if not date or not date.strip():
            raise ValidationError("Date parameter is required", field="date")
        date = date.strip()

        result = []
        for theatre in self._store.list_theatres():
            data = theatre.to_dict()
            date_entry = find_date_entry(theatre, date)
            if date_entry is None:
                data["dates"] = [{"date": date, "seats": [], "showTimes": []}]
            else:
                data["dates"] = [date_entry.to_dict()]
            result.append(data)
        return result


class SeatReservationService:
    """Write-side merge of paid-for seats into the theatre inventory."""

    def __init__(self, store: TheatreStore) -> None:
        self._store = store

    def reserve_seats(self, request: SeatReservationRequest) -> Theatre:
        """Merge the requested seats into the inventory, creating records on demand.

        Re-submitting the same seats is a no-op on the seat set. A caller
        that loses a race with a concurrent reservation gets ConflictError.
        """

        def apply(theatre: Optional[Theatre]) -> Theatre:
            if theatre is None:
                logger.info(f"Creating theatre {request.name!r} in {request.location}")
                theatre = Theatre(
                    name=request.name,
                    address=request.address,
                    location=request.location,
                    distance=DEFAULT_DISTANCE,
                    is_full=False,
                    is_empty=False,
                    dates=[],
                )

            entry = ensure_show_time(theatre, request.show_date, request.show_time,
                                     request.movie_name)
            merge_seats(entry, request.selected_seats)
            return theatre

        theatre = self._store.update_theatre(request.name, apply)

        logger.info(
            "Reserved %s for %s / %s %s / %s (payment=%s)",
            ",".join(request.selected_seats),
            request.name,
            request.show_date,
            request.show_time,
            request.movie_name,
            request.payment_id or "n/a",
        )
        return theatre
