"""Pytest configuration and shared fixtures."""

import pytest

from app import create_app
from booking_ledger import BookingLedger
from database_manager import DatabaseManager
from schemas import SeatReservationRequest, ShowKey
from seat_service import SeatQueryService, SeatReservationService

THEATRE = "PVR Saket"
SHOW_DATE = "01-06-2025"
SHOW_TIME = "18:00"
MOVIE = "Inception"


def make_reservation(seats, name=THEATRE, show_date=SHOW_DATE, show_time=SHOW_TIME,
                     movie=MOVIE, location="Delhi-NCR"):
    return SeatReservationRequest(
        name=name,
        address="Addr",
        location=location,
        selected_seats=tuple(seats),
        show_date=show_date,
        show_time=show_time,
        movie_name=movie,
    )


def make_key(name=THEATRE, show_date=SHOW_DATE, show_time=SHOW_TIME, movie=MOVIE):
    return ShowKey(name, show_date, show_time, movie)


@pytest.fixture
def db(tmp_path):
    # File-backed so every thread's session sees the same database
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'bookit.db'}")
    yield manager
    manager.dispose()


@pytest.fixture
def query(db) -> SeatQueryService:
    return SeatQueryService(db)


@pytest.fixture
def reservation(db) -> SeatReservationService:
    return SeatReservationService(db)


@pytest.fixture
def ledger(db) -> BookingLedger:
    return BookingLedger(db)


@pytest.fixture
def user(db):
    return db.add_user("ana@example.com", first_name="Ana", last_name="Rao")


@pytest.fixture
def app(db):
    return create_app({"TESTING": True, "SEED_DEMO_DATA": False}, store=db)


@pytest.fixture
def client(app):
    return app.test_client()
