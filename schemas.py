"""Validated request records.

Every HTTP payload is turned into one of these before any service or store
is touched; a missing or malformed field raises ValidationError.
"""

from dataclasses import dataclass
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from errors import ValidationError
from models import normalize_email


def require_text(data: Mapping[str, Any], field: str) -> str:
    """Return a trimmed, non-empty string field or raise ValidationError."""
    value = data.get(field)
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} is required", field=field)
    return trimmed


def optional_text(data: Mapping[str, Any], *fields: str) -> Optional[str]:
    """Return the first present string among ``fields`` (aliases), trimmed."""
    for field in fields:
        value = data.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string", field=field)
        return value.strip()
    return None


def normalize_seat_codes(seat_codes: Any, field: str = "selectedSeats") -> Tuple[str, ...]:
    """Validate seat codes and return them deduplicated in first-seen order.

    Repeated codes collapse rather than fail: a seat set has set semantics.
    """
    if seat_codes is None:
        raise ValidationError(f"{field} is required", field=field)
    if not isinstance(seat_codes, list):
        raise ValidationError(f"{field} must be provided as a non-empty JSON array", field=field)
    if len(seat_codes) == 0:
        raise ValidationError(f"{field} must contain at least one seat", field=field)

    normalized: List[str] = []
    for seat in seat_codes:
        if not isinstance(seat, str):
            raise ValidationError(f"each entry of {field} must be a string", field=field)
        trimmed = seat.strip()
        if not trimmed:
            raise ValidationError(f"{field} must not contain empty strings", field=field)
        if trimmed not in normalized:
            normalized.append(trimmed)

    return tuple(normalized)


@dataclass(frozen=True)
class ShowKey:
    """Composite key of one showtime's booked-seat set.

    Dates are compared as plain strings (``DD-MM-YYYY`` by convention), so
    ``01-06-2025`` and ``1-6-2025`` are different keys.
    """

    theatre_name: str
    date: str
    show_time: str
    movie_name: str

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "ShowKey":
        values = {}
        for field in ("theatreName", "date", "showTime", "movieName"):
            value = params.get(field)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(
                    "Theatre name, date, show time, and movie name are required",
                    field=field,
                )
            values[field] = value.strip()

        return cls(
            theatre_name=values["theatreName"],
            date=values["date"],
            show_time=values["showTime"],
            movie_name=values["movieName"],
        )


@dataclass(frozen=True)
class SeatReservationRequest:
    name: str
    address: str
    location: str
    selected_seats: Tuple[str, ...]
    show_date: str
    show_time: str
    movie_name: str
    payment_id: Optional[str] = None

    @property
    def key(self) -> ShowKey:
        return ShowKey(self.name, self.show_date, self.show_time, self.movie_name)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "SeatReservationRequest":
        return cls(
            name=require_text(data, "name"),
            address=require_text(data, "address"),
            location=require_text(data, "location"),
            selected_seats=normalize_seat_codes(data.get("selectedSeats")),
            show_date=require_text(data, "showDate"),
            show_time=require_text(data, "showTime"),
            movie_name=require_text(data, "movieName"),
            payment_id=optional_text(data, "paymentId") or None,
        )


def optional_seat_codes(seat_codes: Any, field: str = "selectedSeats") -> Tuple[str, ...]:
    """Like normalize_seat_codes, but an absent or empty list is allowed."""
    if seat_codes is None or seat_codes == []:
        return ()
    return normalize_seat_codes(seat_codes, field=field)


def parse_amount(value: Any, field: str = "totalAmount") -> float:
    """Accept a number or a numeric string; reject negatives and non-finite values."""
    if value is None:
        return 0.0
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        amount = float(value)
    except ValueError:
        raise ValidationError(f"{field} must be a number", field=field) from None
    if not math.isfinite(amount):
        raise ValidationError(f"{field} must be a number", field=field)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", field=field)
    return amount


@dataclass(frozen=True)
class BookingRecord:
    """Denormalized ticket as submitted by the client after payment.

    Only the shape is checked: any field may be missing, and the dashboard
    reports missing names as ``Unknown``.
    """

    movie_name: Optional[str] = None
    theatre_name: Optional[str] = None
    show_date: Optional[str] = None
    show_time: Optional[str] = None
    selected_seats: Tuple[str, ...] = ()
    total_amount: float = 0.0
    certification: Optional[str] = None
    genres: Optional[str] = None
    language: Optional[str] = None
    theatre_location: Optional[str] = None
    payment_id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Any) -> "BookingRecord":
        if not isinstance(data, dict):
            raise ValidationError("booking must be a JSON object", field="booking")

        def text(*fields: str) -> Optional[str]:
            return optional_text(data, *fields) or None

        return cls(
            movie_name=text("movieName"),
            theatre_name=text("theatreName"),
            show_date=text("showDate"),
            show_time=text("showTime"),
            selected_seats=optional_seat_codes(data.get("selectedSeats")),
            total_amount=parse_amount(data.get("totalAmount")),
            certification=text("certification", "movieCertification"),
            genres=text("genres"),
            language=text("language"),
            theatre_location=text("theatreLocation"),
            payment_id=text("paymentId"),
        )

    def to_fields(self) -> Dict[str, Any]:
        """Column values for a BookedTicket row."""
        return {
            "movie_name": self.movie_name,
            "certification": self.certification,
            "genres": self.genres,
            "language": self.language,
            "theatre_name": self.theatre_name,
            "theatre_location": self.theatre_location,
            "show_date": self.show_date,
            "show_time": self.show_time,
            "total_amount": self.total_amount,
            "selected_seats": list(self.selected_seats),
            "payment_id": self.payment_id,
        }


@dataclass(frozen=True)
class AddBookingRequest:
    email: str
    booking: BookingRecord

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "AddBookingRequest":
        if data.get("booking") is None:
            raise ValidationError("Email and booking details are required", field="booking")
        return cls(
            email=normalize_email(require_text(data, "email")),
            booking=BookingRecord.from_payload(data["booking"]),
        )
