"""Ordered, short-circuiting evaluation of a policy set."""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from fedfirewall.core.exceptions import ConfigurationError
from fedfirewall.policy_engine.permit import Permit, compose
from fedfirewall.policy_engine.policies import Policy
from fedfirewall.policy_engine.resolution import Resolution

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Outcome of evaluating a policy set against one activity."""

    outcome: Permit
    resolutions: List[Resolution] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return self.outcome is Permit.DENY

    @property
    def reason(self) -> str:
        return self.resolutions[-1].reason if self.resolutions else ""


def evaluate_policy_set(
    policies: Sequence[Policy],
    target_user_id: str,
    from_iris: Sequence[str],
    activity_id: str,
    activity_type: str,
) -> Evaluation:
    """
    Fold policy verdicts in order, stopping at the first deny.

    One resolution is produced per policy actually evaluated. Policies after
    a deny are never invoked.

    Args:
        policies: Policies in ascending evaluation order
        target_user_id: Local actor the activity is addressed to
        from_iris: Sender identities, in the order supplied by the caller
        activity_id: IRI of the activity
        activity_type: Activity type

    Returns:
        Evaluation with the composed outcome and the resolutions produced

    Raises:
        ConfigurationError: If there are no policies to evaluate
    """
    if not policies:
        raise ConfigurationError("no policies to evaluate", {"target_user_id": target_user_id})

    outcome = Permit.UNKNOWN
    resolutions: List[Resolution] = []
    for index, policy in enumerate(policies):
        permit, reason = policy.resolve(from_iris, activity_type)
        resolutions.append(
            Resolution(
                order=index,
                permit=permit,
                activity_id=activity_id,
                target_user_id=target_user_id,
                is_public=policy.is_public,
                policy_id=policy.id,
                reason=reason,
            )
        )
        outcome = compose(outcome, permit)
        if outcome is Permit.DENY:
            logger.debug(f"Policy {policy.id} denied {activity_id}, skipping {len(policies) - index - 1} policies")
            break

    return Evaluation(outcome=outcome, resolutions=resolutions)
