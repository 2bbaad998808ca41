"""API route handlers."""

from .analysis import router as analysis_router
from .problems import router as problems_router
from .users import router as users_router
