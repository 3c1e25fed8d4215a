"""
Pydantic models exposed to the API layer (requests/responses).
"""

from .inbox import (
    ErrorResponse,
    InboxCheckRequest,
    InboxCheckResponse,
    ResolutionModel,
)
from .policies import PolicyModel, PolicyRequest
