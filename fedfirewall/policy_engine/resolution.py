"""Audit record of one policy verdict."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from fedfirewall.policy_engine.permit import Permit


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Resolution:
    """The verdict of one policy for one activity.

    Resolutions are append-only. Re-evaluating the same activity produces new
    records with fresh ids rather than replacing earlier ones.
    """

    order: int
    permit: Permit
    activity_id: str
    target_user_id: str
    is_public: bool
    policy_id: str
    reason: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)

    def to_record(self) -> Dict[str, Any]:
        """Flatten to a serializable mapping."""
        return {
            "id": self.id,
            "order": self.order,
            "permit": self.permit.value,
            "activity_id": self.activity_id,
            "target_user_id": self.target_user_id,
            "is_public": self.is_public,
            "policy_id": self.policy_id,
            "reason": self.reason,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Resolution":
        """Rebuild a resolution from a stored row."""
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=row["id"],
            order=int(row["order"]),
            permit=Permit(row["permit"]),
            activity_id=row["activity_id"],
            target_user_id=row["target_user_id"],
            is_public=bool(row["is_public"]),
            policy_id=row["policy_id"],
            reason=row["reason"],
            created_at=created_at,
        )
