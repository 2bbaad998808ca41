from database.repositories.base import BaseRepository
from database.repositories.problem import ProblemRepository, ProblemFilters
from database.repositories.user import UserRepository

__all__ = [
    'BaseRepository',
    'ProblemRepository',
    'ProblemFilters',
    'UserRepository',
]
