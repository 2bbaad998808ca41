import contextlib
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from database.database import Database
from database.repositories import ProblemRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class StoreUnitOfWork:
    """Repositories sharing one session for the duration of a unit of work."""
    session: Session
    problems: ProblemRepository
    users: UserRepository


@contextlib.contextmanager
def store_uow(database: Database):
    """Per-unit-of-work transaction scope.

    Yields a StoreUnitOfWork bound to a fresh Session. Commits on success,
    rolls back on exception, always closes. Any SQLAlchemy failure leaves
    this scope as StorageError.

    Usage:
        with store_uow(database) as uow:
            problem = uow.problems.get_by_question_id(1)
        # commit happens automatically on successful exit
    """
    try:
        with database.session_scope() as session:
            yield StoreUnitOfWork(
                session=session,
                problems=ProblemRepository(session),
                users=UserRepository(session),
            )
    except SQLAlchemyError as e:
        logger.error(f"Storage operation failed: {e}")
        raise StorageError(str(e)) from e
