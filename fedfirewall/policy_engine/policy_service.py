"""Policy service - core business logic."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

from fedfirewall.core.exceptions import ConfigurationError, MalformedInputError
from fedfirewall.policy_engine.evaluator import evaluate_policy_set
from fedfirewall.policy_engine.permit import Permit
from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE, Policy
from fedfirewall.policy_engine.ports.policy_store_port import IPolicyStore
from fedfirewall.policy_engine.ports.resolution_sink_port import IResolutionSink
from fedfirewall.policy_engine.ports.unit_of_work_port import IDatabase
from fedfirewall.policy_engine.resolution import Resolution

logger = logging.getLogger(__name__)


@dataclass
class PolicyDecision:
    """Data structure for policy decision."""

    blocked: bool
    outcome: Permit
    reason: str
    resolutions: List[Resolution] = field(default_factory=list)


def parse_activity_id(activity_id: str) -> str:
    """
    Check that an activity IRI is absolute.

    Args:
        activity_id: Activity IRI

    Returns:
        The IRI, unchanged

    Raises:
        MalformedInputError: If the IRI has no scheme or authority
    """
    try:
        parts = urlsplit(activity_id)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"unparsable activity id: {activity_id!r}", {"activity_id": str(activity_id)}) from e
    if not parts.scheme or not parts.netloc:
        raise MalformedInputError(f"activity id is not an absolute IRI: {activity_id!r}", {"activity_id": activity_id})
    return activity_id


class PolicyService:
    """Service deciding whether inbound activities are blocked."""

    def __init__(
        self,
        database: IDatabase,
        policy_store: IPolicyStore,
        resolution_sink: IResolutionSink,
        purpose: str = FEDERATED_BLOCK_PURPOSE,
    ):
        """
        Initialize policy service with injected dependencies.

        Args:
            database: Storage backend handing out units of work
            policy_store: Policy store implementation
            resolution_sink: Resolution sink implementation
            purpose: Decision category evaluated by this service
        """
        self.database = database
        self.policy_store = policy_store
        self.resolution_sink = resolution_sink
        self.purpose = purpose

    async def evaluate(
        self,
        target_user_id: str,
        from_iris: Sequence[str],
        activity_id: str,
        activity_type: str,
    ) -> PolicyDecision:
        """
        Evaluate the policies governing an actor's inbox against one activity.

        Every computed resolution is written before returning, including
        when the outcome stays unknown: the batch is committed first and the
        ConfigurationError is raised afterwards.

        Args:
            target_user_id: Local actor the activity is addressed to
            from_iris: Sender identities, in the order supplied by the pipeline
            activity_id: IRI of the activity
            activity_type: Activity type

        Returns:
            PolicyDecision with the final decision

        Raises:
            MalformedInputError: If activity_id is not an absolute IRI
            ConfigurationError: If there are no policies or no policy decided
            PersistenceError: If reading policies or writing resolutions fails
        """
        parse_activity_id(activity_id)
        from_iris = list(from_iris)

        async with self.database.unit_of_work() as uow:
            uow.ensure_active()
            policies = await self.policy_store.get_ordered_policies(uow, target_user_id, self.purpose)
            evaluation = evaluate_policy_set(policies, target_user_id, from_iris, activity_id, activity_type)
            uow.ensure_active()
            await self.resolution_sink.insert_resolutions(uow, evaluation.resolutions)

        logger.info(
            f"Evaluated {len(evaluation.resolutions)}/{len(policies)} policies for {activity_id} "
            f"to {target_user_id}: {evaluation.outcome.value}"
        )

        if evaluation.outcome is Permit.UNKNOWN:
            raise ConfigurationError(
                "unknown resolution after evaluating all policies",
                {
                    "activity_id": activity_id,
                    "target_user_id": target_user_id,
                    "resolution_ids": [r.id for r in evaluation.resolutions],
                },
            )

        return PolicyDecision(
            blocked=evaluation.blocked,
            outcome=evaluation.outcome,
            reason=evaluation.reason,
            resolutions=evaluation.resolutions,
        )

    async def is_blocked(
        self,
        target_user_id: str,
        from_iris: Sequence[str],
        activity_id: str,
        activity_type: str,
    ) -> bool:
        """Return True if the activity must not be delivered to the actor's inbox."""
        decision = await self.evaluate(target_user_id, from_iris, activity_id, activity_type)
        return decision.blocked

    async def add_policy(self, policy: Policy) -> str:
        """Store a new policy and return its ID."""
        async with self.database.unit_of_work() as uow:
            policy_id = await self.policy_store.insert_policy(uow, policy)
        logger.info(f"Policy {policy_id} added ({policy.kind.value}, order {policy.order})")
        return policy_id

    async def update_policy(self, policy: Policy) -> None:
        """Replace an existing policy."""
        async with self.database.unit_of_work() as uow:
            await self.policy_store.update_policy(uow, policy)
        logger.info(f"Policy {policy.id} updated ({policy.kind.value}, order {policy.order})")

    async def sync_policies(self, policies: Sequence[Policy]) -> int:
        """
        Insert or update policies by ID in a single unit of work.

        Args:
            policies: Policies to store, typically loaded from YAML

        Returns:
            Number of policies written
        """
        async with self.database.unit_of_work() as uow:
            for policy in policies:
                if await self.policy_store.get_policy(uow, policy.id) is None:
                    await self.policy_store.insert_policy(uow, policy)
                else:
                    await self.policy_store.update_policy(uow, policy)
        logger.info(f"Synchronized {len(policies)} policies")
        return len(policies)

    async def get_policy(self, policy_id: str) -> Optional[Policy]:
        async with self.database.unit_of_work() as uow:
            return await self.policy_store.get_policy(uow, policy_id)

    async def instance_policies(self) -> List[Policy]:
        async with self.database.unit_of_work() as uow:
            return await self.policy_store.instance_policies(uow, self.purpose)

    async def user_policies(self, user_id: str) -> List[Policy]:
        async with self.database.unit_of_work() as uow:
            return await self.policy_store.user_policies(uow, user_id, self.purpose)

    async def user_resolutions(self, user_id: str) -> List[Resolution]:
        """Get the audit trail of activities addressed to an actor, oldest first."""
        async with self.database.unit_of_work() as uow:
            return await self.resolution_sink.user_resolutions(uow, user_id)
