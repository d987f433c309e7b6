"""ORM model definitions describing the theatre inventory and booking ledger schema."""

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone
from typing import Any, Dict

Base = declarative_base()

DEFAULT_DISTANCE = '0 km'


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """Emails are stored trimmed and lower-cased; lookups must match."""
    return email.strip().lower()


class Theatre(Base):
    """A cinema document owning its nested seat inventory."""
    __tablename__ = 'theatres'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    address = Column(String, nullable=False)
    location = Column(String, nullable=False)
    distance = Column(String, nullable=False, default=DEFAULT_DISTANCE)
    is_full = Column(Boolean, nullable=False, default=False)
    is_empty = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
    # Bumped on every write; a stale writer fails instead of overwriting
    version = Column(Integer, nullable=False)

    dates = relationship('ShowDate', back_populates='theatre', cascade='all, delete-orphan',
                         order_by='ShowDate.id', lazy='selectin')

    __mapper_args__ = {'version_id_col': version}

    __table_args__ = (
        Index('idx_theatres_location', 'location'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "location": self.location,
            "distance": self.distance,
            "isFull": bool(self.is_full),
            "isEmpty": bool(self.is_empty),
            "dates": [entry.to_dict() for entry in self.dates],
        }


class ShowDate(Base):
    """Per-calendar-date bucket of a theatre's inventory."""
    __tablename__ = 'show_dates'

    id = Column(Integer, primary_key=True)
    theatre_id = Column(Integer, ForeignKey('theatres.id', ondelete='CASCADE'), nullable=False)
    date = Column(String, nullable=False)
    # Legacy flat seat list, superseded by per-showtime tracking
    seats = Column(JSON, nullable=False, default=list)

    theatre = relationship('Theatre', back_populates='dates')
    show_times = relationship('ShowTime', back_populates='show_date', cascade='all, delete-orphan',
                              order_by='ShowTime.id', lazy='selectin')

    __table_args__ = (
        UniqueConstraint('theatre_id', 'date', name='uq_show_dates_theatre_date'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "seats": list(self.seats or []),
            "showTimes": [show_time.to_dict() for show_time in self.show_times],
        }


class ShowTime(Base):
    """Booked-seat set for one (time, movie) pair under a date."""
    __tablename__ = 'show_times'

    id = Column(Integer, primary_key=True)
    show_date_id = Column(Integer, ForeignKey('show_dates.id', ondelete='CASCADE'), nullable=False)
    time = Column(String, nullable=False)
    movie_name = Column(String, nullable=False)
    # Reassigned, never mutated in place, so the ORM sees every change
    booked_seats = Column(JSON, nullable=False, default=list)

    show_date = relationship('ShowDate', back_populates='show_times')

    __table_args__ = (
        UniqueConstraint('show_date_id', 'time', 'movie_name', name='uq_show_times_slot'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "movieName": self.movie_name,
            "bookedSeats": list(self.booked_seats or []),
        }


class User(Base):
    """Ledger owner; authentication lives with the external token issuer."""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    first_name = Column(String, nullable=False, default='')
    last_name = Column(String, nullable=False, default='')
    is_active = Column(Boolean, nullable=False, default=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    tickets = relationship('BookedTicket', back_populates='user', cascade='all, delete-orphan',
                           order_by='BookedTicket.id', lazy='selectin')

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class BookedTicket(Base):
    """Append-only, denormalized copy of a completed booking."""
    __tablename__ = 'booked_tickets'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    movie_name = Column(String)
    certification = Column(String)
    genres = Column(String)
    language = Column(String)
    theatre_name = Column(String)
    theatre_location = Column(String)
    show_date = Column(String)
    show_time = Column(String)
    total_amount = Column(Float, nullable=False, default=0.0)
    selected_seats = Column(JSON, nullable=False, default=list)
    payment_id = Column(String)
    booking_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship('User', back_populates='tickets')

    __table_args__ = (
        Index('idx_booked_tickets_user', 'user_id'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "movieName": self.movie_name,
            "certification": self.certification,
            "genres": self.genres,
            "language": self.language,
            "theatreName": self.theatre_name,
            "theatreLocation": self.theatre_location,
            "showDate": self.show_date,
            "showTime": self.show_time,
            "totalAmount": self.total_amount,
            "selectedSeats": list(self.selected_seats or []),
            "paymentId": self.payment_id,
            "bookingDate": self.booking_date.isoformat() if self.booking_date else None,
        }
