"""Unit tests for BookingLedger and the admin dashboard aggregation.

Run with: pytest tests/test_booking_ledger.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from booking_ledger import RECENT_BOOKINGS_LIMIT, summarize_bookings
from errors import UserNotFoundError, ValidationError
from models import BookedTicket, User
from schemas import BookingRecord


def make_record(movie="Inception", theatre="PVR Saket", show_date="01-06-2025",
                seats=("A1", "A2"), amount=660.0):
    return BookingRecord(
        movie_name=movie,
        theatre_name=theatre,
        show_date=show_date,
        show_time="18:00",
        selected_seats=tuple(seats),
        total_amount=amount,
        certification="UA",
        genres="Sci-Fi",
        language="English",
        theatre_location="Delhi-NCR",
    )


class TestAppendBooking:
    """Tests for BookingLedger.append_booking."""

    def test_append_returns_full_ledger(self, ledger, user):
        ledger.append_booking(user.email, make_record())
        tickets = ledger.append_booking(user.email, make_record(movie="Dune", seats=["C1"]))

        assert [ticket.movie_name for ticket in tickets] == ["Inception", "Dune"]
        assert tickets[1].selected_seats == ["C1"]

    def test_booking_date_is_server_assigned(self, ledger, user):
        before = datetime.now(timezone.utc)
        ticket = ledger.append_booking(user.email, make_record())[-1]

        assert ticket.booking_date is not None
        booked_at = ticket.booking_date
        if booked_at.tzinfo is None:
            booked_at = booked_at.replace(tzinfo=timezone.utc)
        assert booked_at >= before - timedelta(seconds=1)

    def test_ticket_keeps_denormalized_fields(self, ledger, user):
        ticket = ledger.append_booking(user.email, make_record())[0]

        data = ticket.to_dict()
        assert data["certification"] == "UA"
        assert data["theatreLocation"] == "Delhi-NCR"
        assert data["totalAmount"] == 660.0
        assert data["selectedSeats"] == ["A1", "A2"]

    def test_email_lookup_ignores_case_and_spaces(self, ledger, user):
        tickets = ledger.append_booking("  ANA@Example.com ", make_record())

        assert len(tickets) == 1
        assert len(ledger.booked_tickets("ana@example.com")) == 1

    def test_unknown_email_raises_and_creates_nothing(self, ledger, db, user):
        with pytest.raises(UserNotFoundError):
            ledger.append_booking("ghost@example.com", make_record())

        assert db.find_user("ghost@example.com") is None
        assert [u.email for u in db.list_users()] == [user.email]

    def test_booked_tickets_unknown_email_raises(self, ledger):
        with pytest.raises(UserNotFoundError):
            ledger.booked_tickets("ghost@example.com")

    def test_booked_tickets_empty_for_new_user(self, ledger, user):
        assert ledger.booked_tickets(user.email) == []


class TestDashboard:
    """Tests for the admin booking summary."""

    def test_dashboard_counts_users(self, ledger, db, user):
        db.add_user("root@example.com", is_admin=True)

        data = ledger.dashboard()

        assert data["totalUsers"] == 2
        assert data["activeUsers"] == 2
        assert data["adminUsers"] == 1

    def test_summary_aggregates_across_users(self, ledger, db, user):
        other = db.add_user("ben@example.com", first_name="Ben", last_name="Ito")
        ledger.append_booking(user.email, make_record(amount=660.0))
        ledger.append_booking(user.email, make_record(movie="Dune", theatre="INOX",
                                                      show_date="02-06-2025", seats=["C1"],
                                                      amount=330.0))
        ledger.append_booking(other.email, make_record(seats=["B1", "B2", "B3"], amount=990.0))

        summary = ledger.dashboard()["bookingSummary"]

        assert summary["totalBookings"] == 3
        assert summary["totalRevenue"] == pytest.approx(1980.0)
        assert summary["totalSeatsBooked"] == 6
        assert summary["popularMovies"][0] == {"name": "Inception", "count": 2, "revenue": 1650.0}
        assert [t["name"] for t in summary["popularTheatres"]] == ["PVR Saket", "INOX"]
        assert [d["date"] for d in summary["bookingsByDate"]] == ["01-06-2025", "02-06-2025"]

        recent = summary["recentBookings"][0]
        assert recent["userEmail"] == "ben@example.com"
        assert recent["userName"] == "Ben Ito"

    def test_recent_bookings_newest_first_and_capped(self):
        user = User(email="ana@example.com", first_name="Ana", last_name="Rao",
                    is_active=True, is_admin=False)
        start = datetime(2025, 6, 1, tzinfo=timezone.utc)
        for i in range(RECENT_BOOKINGS_LIMIT + 2):
            user.tickets.append(BookedTicket(
                id=i + 1, movie_name=f"Movie {i}", selected_seats=["A1"],
                total_amount=100.0, booking_date=start + timedelta(hours=i),
            ))

        summary = summarize_bookings([user])

        recent = summary["recentBookings"]
        assert len(recent) == RECENT_BOOKINGS_LIMIT
        assert recent[0]["movieName"] == f"Movie {RECENT_BOOKINGS_LIMIT + 1}"
        assert recent[-1]["movieName"] == "Movie 2"

    def test_missing_names_group_under_unknown(self):
        user = User(email="ana@example.com", first_name="Ana", last_name="Rao")
        user.tickets.append(BookedTicket(
            id=1, selected_seats=[], total_amount=0.0,
            booking_date=datetime(2025, 6, 1, tzinfo=timezone.utc),
        ))

        summary = summarize_bookings([user])

        assert summary["popularMovies"] == [{"name": "Unknown", "count": 1, "revenue": 0.0}]
        assert summary["recentBookings"][0]["showDate"] == "N/A"


class TestBookingRecordPayload:

    def test_partial_booking_is_accepted(self):
        record = BookingRecord.from_payload({"totalAmount": 200, "selectedSeats": ["A1"]})

        assert record.movie_name is None
        assert record.theatre_name is None
        assert record.show_date is None
        assert record.selected_seats == ("A1",)
        assert record.total_amount == 200.0

    def test_blank_names_are_stored_as_missing(self):
        record = BookingRecord.from_payload({"movieName": "  ", "showTime": ""})

        assert record.movie_name is None
        assert record.show_time is None
        assert record.selected_seats == ()

    @pytest.mark.parametrize("amount, expected", [("660", 660.0), (" 99.5 ", 99.5), (None, 0.0)])
    def test_amount_accepts_numeric_strings(self, amount, expected):
        assert BookingRecord.from_payload({"totalAmount": amount}).total_amount == expected

    @pytest.mark.parametrize("amount", ["lots", "nan", "inf", True, [660], -1, "-5"])
    def test_amount_rejects_non_numbers_and_negatives(self, amount):
        with pytest.raises(ValidationError):
            BookingRecord.from_payload({"totalAmount": amount})

    @pytest.mark.parametrize("field, value", [
        ("movieName", 42),
        ("selectedSeats", "A1"),
        ("selectedSeats", ["A1", 7]),
    ])
    def test_present_fields_must_have_the_right_type(self, field, value):
        with pytest.raises(ValidationError):
            BookingRecord.from_payload({field: value})

    def test_partial_booking_groups_under_unknown(self, ledger, user):
        ledger.append_booking(user.email, BookingRecord.from_payload({"totalAmount": "200"}))

        summary = ledger.dashboard()["bookingSummary"]
        assert summary["popularMovies"] == [{"name": "Unknown", "count": 1, "revenue": 200.0}]
        assert summary["popularTheatres"][0]["name"] == "Unknown"
        assert summary["bookingsByDate"][0]["date"] == "Unknown"
        assert summary["recentBookings"][0]["showTime"] == "N/A"
