from typing import Optional

from pydantic import BaseModel


class PolicyRequest(BaseModel):
    """Policy definition sent by administrators."""

    order: int
    scope: str  # instance, user
    kind: str
    subject: Optional[str] = None
    owner_id: Optional[str] = None
    description: str = ""


class PolicyModel(BaseModel):
    id: str
    order: int
    scope: str
    owner_id: Optional[str] = None
    is_public: bool
    subject: str
    kind: str
    description: str
    purpose: str
