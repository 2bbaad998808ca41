from .base import Base, JSONType
from .problem import Problem
from .user import User

__all__ = [
    'Base',
    'JSONType',
    'Problem',
    'User',
]
