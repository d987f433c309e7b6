"""Per-user append-only booking ledger and the admin aggregates built on it."""

from collections import OrderedDict
from typing import Any, Dict, Iterable, List
import logging

from errors import UserNotFoundError
from inventory_store import LedgerStore
from models import BookedTicket, User, normalize_email
from schemas import BookingRecord

logger = logging.getLogger(__name__)

RECENT_BOOKINGS_LIMIT = 10
UNKNOWN = 'Unknown'


class BookingLedger:
    """Reads and appends the tickets a user has bought."""

    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def booked_tickets(self, email: str) -> List[BookedTicket]:
        """Return the user's tickets in booking order.

        Raises:
            UserNotFoundError: If no user has this email.
        """
        user = self._store.find_user(email)
        if user is None:
            raise UserNotFoundError(email)
        return list(user.tickets)

    def append_booking(self, email: str, record: BookingRecord) -> List[BookedTicket]:
        """Append ``record`` with a server-assigned booking date.

        Raises:
            UserNotFoundError: If no user has this email; nothing is created.
        """
        email = normalize_email(email)
        tickets = self._store.append_booking(email, record.to_fields())
        if tickets is None:
            logger.warning(f"Booking rejected, unknown user: {email}")
            raise UserNotFoundError(email)

        logger.info(
            "Booking added for %s: %s at %s on %s %s (%d seats)",
            email, record.movie_name, record.theatre_name,
            record.show_date, record.show_time, len(record.selected_seats),
        )
        return tickets

    def dashboard(self) -> Dict[str, Any]:
        users = self._store.list_users()
        return {
            "totalUsers": len(users),
            "activeUsers": sum(1 for user in users if user.is_active),
            "adminUsers": sum(1 for user in users if user.is_admin),
            "bookingSummary": summarize_bookings(users),
        }


def _bump(groups: Dict[str, Dict[str, float]], name: str, amount: float) -> None:
    group = groups.setdefault(name, {"count": 0, "revenue": 0.0})
    group["count"] += 1
    group["revenue"] += amount


def summarize_bookings(users: Iterable[User]) -> Dict[str, Any]:
    """Aggregate every user's tickets into revenue and popularity figures."""
    total_bookings = 0
    total_revenue = 0.0
    total_seats = 0
    movies: Dict[str, Dict[str, float]] = OrderedDict()
    theatres: Dict[str, Dict[str, float]] = OrderedDict()
    by_date: Dict[str, Dict[str, float]] = OrderedDict()
    recent = []

    for user in users:
        for ticket in user.tickets:
            amount = ticket.total_amount or 0.0
            total_bookings += 1
            total_revenue += amount
            total_seats += len(ticket.selected_seats or [])

            _bump(movies, ticket.movie_name or UNKNOWN, amount)
            _bump(theatres, ticket.theatre_name or UNKNOWN, amount)
            _bump(by_date, ticket.show_date or UNKNOWN, amount)
            recent.append((ticket, user))

    recent.sort(key=lambda pair: (pair[0].booking_date, pair[0].id), reverse=True)

    recent_bookings = []
    for ticket, user in recent[:RECENT_BOOKINGS_LIMIT]:
        entry = ticket.to_dict()
        entry.update(
            userEmail=user.email,
            userName=user.full_name,
            showTime=ticket.show_time or 'N/A',
            showDate=ticket.show_date or 'N/A',
        )
        recent_bookings.append(entry)

    # sorted() is stable, so equal counts keep first-seen order
    return {
        "totalBookings": total_bookings,
        "totalRevenue": total_revenue,
        "totalSeatsBooked": total_seats,
        "popularMovies": sorted(
            ({"name": name, **data} for name, data in movies.items()),
            key=lambda item: item["count"], reverse=True,
        ),
        "popularTheatres": sorted(
            ({"name": name, **data} for name, data in theatres.items()),
            key=lambda item: item["count"], reverse=True,
        ),
        "bookingsByDate": sorted(
            ({"date": date, **data} for date, data in by_date.items()),
            key=lambda item: item["date"],
        ),
        "recentBookings": recent_bookings,
    }
