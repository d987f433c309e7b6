"""Store interfaces (repository pattern).

Services depend on these interfaces only, so the SQLAlchemy-backed
``DatabaseManager`` can be swapped or mocked.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from models import BookedTicket, Theatre, User

TheatreMutation = Callable[[Optional[Theatre]], Theatre]


class TheatreStore(ABC):
    """Interface for theatre inventory persistence."""

    @abstractmethod
    def find_theatre(self, name: str) -> Optional[Theatre]:
        """Return the theatre with this exact name, or None."""
        ...

    @abstractmethod
    def list_theatres(self, location: Optional[str] = None) -> List[Theatre]:
        """Return all theatres, optionally only those in ``location``."""
        ...

    @abstractmethod
    def count_theatres(self) -> int:
        ...

    @abstractmethod
    def update_theatre(self, name: str, mutate: TheatreMutation) -> Theatre:
        """Apply ``mutate`` to the theatre named ``name`` in one transaction.

        ``mutate`` receives the current theatre (None if absent) and returns
        the theatre to persist. Raises ConflictError if a concurrent writer
        got there first.
        """
        ...

    @abstractmethod
    def add_theatres(self, theatres: Iterable[Theatre]) -> int:
        """Insert fully built theatre documents; returns how many were added."""
        ...


class LedgerStore(ABC):
    """Interface for the per-user booking ledger."""

    @abstractmethod
    def find_user(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def add_user(self, email: str, first_name: str = '', last_name: str = '',
                 is_admin: bool = False) -> User:
        """Create a ledger owner. Raises ConflictError if the email is taken."""
        ...

    @abstractmethod
    def append_booking(self, email: str, fields: Dict[str, Any]) -> Optional[List[BookedTicket]]:
        """Append a ticket built from ``fields``; None if the user is unknown."""
        ...

    @abstractmethod
    def list_users(self) -> List[User]:
        """Return every user with their tickets loaded."""
        ...
