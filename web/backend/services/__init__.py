"""Business logic services."""

from .analysis_service import AnalysisService
from .problem_service import ProblemService
from .user_service import UserService
