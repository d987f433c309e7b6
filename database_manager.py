"""Database coordination layer encapsulating theatre inventory and ledger writes."""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional
import logging

from errors import ConflictError, DomainError, PersistenceError
from inventory_store import LedgerStore, TheatreMutation, TheatreStore
from models import Base, BookedTicket, Theatre, User, normalize_email, utcnow

logger = logging.getLogger(__name__)


class DatabaseManager(TheatreStore, LedgerStore):
    """Thread-safe façade over SQLAlchemy sessions and transactional flows."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 40,
        pool_recycle: int = 3600,
    ):
        engine_options: Dict[str, Any] = {
            "pool_pre_ping": True,  # Reconnect if connection lost
            "echo": False,
        }
        if database_url.startswith('sqlite'):
            # Request threads share pooled connections
            engine_options["connect_args"] = {"check_same_thread": False}
        else:
            engine_options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=pool_recycle,
            )

        self.engine = create_engine(database_url, **engine_options)
        self.session_factory = scoped_session(
            sessionmaker(bind=self.engine, expire_on_commit=False)
        )

        # Create tables
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self):
        """Provide a transactional scope, committing on success and rolling back otherwise.

        Lost races surface as ConflictError, any other storage failure as a
        generic PersistenceError whose detail only reaches the log.
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except DomainError:
            session.rollback()
            raise
        except (StaleDataError, IntegrityError) as e:
            session.rollback()
            logger.warning(f"Concurrent write rejected: {e}")
            raise ConflictError() from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise PersistenceError() from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.session_factory.remove()
        self.engine.dispose()

    # Theatre inventory

    def find_theatre(self, name: str) -> Optional[Theatre]:
        with self.get_session() as session:
            return session.query(Theatre).filter_by(name=name).first()

    def list_theatres(self, location: Optional[str] = None) -> List[Theatre]:
        with self.get_session() as session:
            query = session.query(Theatre)
            if location:
                query = query.filter(Theatre.location == location)
            return query.order_by(Theatre.id).all()

    def count_theatres(self) -> int:
        with self.get_session() as session:
            return session.query(Theatre).count()

    def update_theatre(self, name: str, mutate: TheatreMutation) -> Theatre:
        """Run a read-modify-write on one theatre document under a row lock.

        SELECT FOR UPDATE serializes writers on databases that support it;
        the version column catches the rest at flush time.
        """
        with self.get_session() as session:
            theatre = session.query(Theatre).filter_by(name=name).with_for_update().first()

            updated = mutate(theatre)
            if theatre is None:
                session.add(updated)
            # Touch the row so its version check runs even when only children changed
            updated.updated_at = utcnow()

            session.flush()
            return updated

    def add_theatres(self, theatres: Iterable[Theatre]) -> int:
        with self.get_session() as session:
            batch = list(theatres)
            session.add_all(batch)
            return len(batch)

    # Booking ledger

    def find_user(self, email: str) -> Optional[User]:
        with self.get_session() as session:
            return session.query(User).filter_by(email=normalize_email(email)).first()

    def add_user(self, email: str, first_name: str = '', last_name: str = '',
                 is_admin: bool = False) -> User:
        with self.get_session() as session:
            email = normalize_email(email)
            if session.query(User).filter_by(email=email).first():
                raise ConflictError("user already exists")

            user = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                is_admin=is_admin,
            )
            session.add(user)
            session.flush()
            return user

    def append_booking(self, email: str, fields: Dict[str, Any]) -> Optional[List[BookedTicket]]:
        with self.get_session() as session:
            user = session.query(User).filter_by(email=normalize_email(email)).first()
            if not user:
                return None

            user.tickets.append(BookedTicket(**fields, booking_date=utcnow()))
            session.flush()
            return list(user.tickets)

    def list_users(self) -> List[User]:
        with self.get_session() as session:
            return session.query(User).order_by(User.id).all()

    def health_check(self) -> Dict:
        """Report database connectivity and theatre count; used by the /health endpoint."""
        try:
            with self.get_session() as session:
                # Test database connection
                session.execute(text("SELECT 1"))

                theatre_count = session.query(Theatre).count()

                return {
                    "status": "healthy",
                    "database": "connected",
                    "theatres": theatre_count
                }
        except DomainError as e:
            logger.error(f"Health check failed: {e}")
            return {
                "status": "unhealthy",
                "database": "disconnected",
            }
