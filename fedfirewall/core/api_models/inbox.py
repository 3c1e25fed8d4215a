from datetime import datetime

from pydantic import BaseModel, Field


class InboxCheckRequest(BaseModel):
    """Inbound activity to check against an actor's policies."""

    activity_id: str
    activity_type: str
    from_iris: list[str] = Field(default_factory=list)


class ResolutionModel(BaseModel):
    """One recorded policy verdict."""

    id: str
    order: int
    permit: str  # grant, deny, unknown
    activity_id: str
    target_user_id: str
    is_public: bool
    policy_id: str
    reason: str
    created_at: datetime


class InboxCheckResponse(BaseModel):
    blocked: bool
    outcome: str
    reason: str | None = None
    resolutions: list[ResolutionModel] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: dict = Field(default_factory=dict)
