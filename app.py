"""HTTP entrypoint for the seat inventory backend."""

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging
from typing import Any, Dict, Optional

from booking_ledger import BookingLedger
from config import Config
from database_manager import DatabaseManager
from demo_data import initialize_demo_data
from errors import DomainError, ValidationError
from schemas import AddBookingRequest, SeatReservationRequest, ShowKey
from seat_service import SeatQueryService, SeatReservationService

logger = logging.getLogger(__name__)

cinema_bp = Blueprint('cinema', __name__, url_prefix='/bookit/cinema')
user_bp = Blueprint('user', __name__, url_prefix='/bookit/user')
admin_bp = Blueprint('admin', __name__, url_prefix='/bookit/admin')
root_bp = Blueprint('root', __name__)


def services() -> Dict[str, Any]:
    return current_app.extensions['bookit']


def require_json_object() -> Dict[str, Any]:
    """Ensure the request body is a JSON object before proceeding."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


# Error mapping

def handle_domain_error(error: DomainError):
    if error.status_code >= 500:
        logger.error(f"{request.method} {request.path} failed: {error}")
    else:
        logger.warning(f"{request.method} {request.path} rejected: {error}")
    payload = {"success": False, "message": error.message, "code": error.code.value}
    return jsonify(payload), error.status_code


def handle_http_error(error: HTTPException):
    return jsonify({"success": False, "message": error.description}), error.code


def handle_unexpected_error(error: Exception):
    logger.exception(f"{request.method} {request.path} crashed")
    return jsonify({"success": False, "message": "Internal server error"}), 500


# Cinema inventory

@cinema_bp.route('/booked-seats', methods=['GET'])
def get_booked_seats():
    """Return the booked seat codes for one showtime."""
    key = ShowKey.from_query(request.args)
    booked = services()['query'].get_booked_seats(key)
    return jsonify({"success": True, "bookedSeats": booked})


@cinema_bp.route('/seats-count', methods=['GET'])
def get_booked_seats_count():
    key = ShowKey.from_query(request.args)
    count = services()['query'].get_booked_seats_count(key)
    return jsonify({"success": True, "count": count})


@cinema_bp.route('/verify/<name>', methods=['GET'])
def verify_cinema_name(name):
    """Report whether a theatre with this exact name exists."""
    exists, theatre = services()['query'].verify_cinema_name(name)
    return jsonify({
        "success": True,
        "exists": exists,
        "data": theatre.to_dict() if theatre else None,
    })


@cinema_bp.route('/list', methods=['GET'])
def list_cinemas():
    location = request.args.get('location', '').strip() or None
    theatres = services()['query'].list_cinemas(location)
    return jsonify({"success": True, "data": [theatre.to_dict() for theatre in theatres]})


@cinema_bp.route('/seats', methods=['POST'])
def reserve_seats():
    """Merge paid-for seats into the theatre inventory."""
    reservation = SeatReservationRequest.from_payload(require_json_object())
    theatre = services()['reservation'].reserve_seats(reservation)
    return jsonify({"success": True, "data": theatre.to_dict()}), 200


# User ledger

@user_bp.route('/booked-tickets', methods=['GET'])
def get_booked_tickets():
    email = request.args.get('email', '').strip()
    if not email:
        raise ValidationError("Email is required", field="email")

    tickets = services()['ledger'].booked_tickets(email)
    return jsonify({"success": True, "tickets": [ticket.to_dict() for ticket in tickets]})


@user_bp.route('/add-booking', methods=['POST'])
def add_booking():
    """Append a completed booking to the user's ledger."""
    booking = AddBookingRequest.from_payload(require_json_object())
    tickets = services()['ledger'].append_booking(booking.email, booking.booking)
    return jsonify({
        "success": True,
        "message": "Booking added successfully",
        "tickets": [ticket.to_dict() for ticket in tickets],
    }), 200


# Admin

@admin_bp.route('/dashboard', methods=['GET'])
def dashboard():
    return jsonify({"success": True, "data": services()['ledger'].dashboard()})


@admin_bp.route('/theater-seats', methods=['GET'])
def theater_seats():
    """Occupancy of every theatre for one date."""
    data = services()['query'].theatres_for_date(request.args.get('date', ''))
    return jsonify({"success": True, "data": data})


@root_bp.route('/')
def home_page():
    return jsonify({"message": "BookIt seat inventory ready"})


@root_bp.route('/health', methods=['GET'])
def health_check():
    """Expose the database connectivity and theatre count."""
    return jsonify(services()['db'].health_check())


def create_app(overrides: Optional[Dict[str, Any]] = None,
               store: Optional[DatabaseManager] = None) -> Flask:
    """Build the Flask app; tests pass ``overrides`` and an injected ``store``."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=app.config['LOG_LEVEL'])

    origins = app.config['CORS_ORIGINS']
    if origins != '*':
        origins = [origin.strip() for origin in origins.split(',') if origin.strip()]
    CORS(app, resources={r"/*": {"origins": origins}})

    # One database layer per app so all request handlers reuse the same pool
    db = store or DatabaseManager(
        app.config['DATABASE_URL'],
        pool_size=app.config['DB_POOL_SIZE'],
        max_overflow=app.config['DB_MAX_OVERFLOW'],
        pool_recycle=app.config['DB_POOL_RECYCLE'],
    )
    app.extensions['bookit'] = {
        "db": db,
        "query": SeatQueryService(db),
        "reservation": SeatReservationService(db),
        "ledger": BookingLedger(db),
    }

    if app.config['SEED_DEMO_DATA']:
        try:
            initialize_demo_data(db, db)
        except DomainError as e:
            logger.error(f"❌ Failed to initialize demo data: {e}")

    for blueprint in (root_bp, cinema_bp, user_bp, admin_bp):
        app.register_blueprint(blueprint)

    app.register_error_handler(DomainError, handle_domain_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected_error)

    return app


if __name__ == '__main__':
    app = create_app()

    logger.info("""
    ================================
    BOOKIT SEAT INVENTORY
    ================================
    Database: %s
    Concurrency: row lock + version check per theatre
    ================================
    """, app.config['DATABASE_URL'].split('@')[-1])

    app.run(host="0.0.0.0", port=app.config['PORT'], debug=False, threaded=True)
