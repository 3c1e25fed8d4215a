"""Shared fixtures for firewall tests."""

from typing import List, Optional, Sequence, Tuple

import pytest

from fedfirewall.policy_engine.adapters.memory_store import (
    MemoryDatabase,
    MemoryPolicyStore,
    MemoryResolutionSink,
)
from fedfirewall.policy_engine.permit import Permit
from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE, Policy, PolicyScope, build_rule
from fedfirewall.policy_engine.policy_service import PolicyService
from fedfirewall.policy_engine.ports.policy_store_port import IPolicyStore

ACTIVITY_ID = "https://remote.example/activities/1"
TARGET_USER = "alice"


def make_policy(
    kind: str,
    subject: Optional[str] = None,
    order: int = 0,
    scope: PolicyScope = PolicyScope.INSTANCE,
    owner_id: Optional[str] = None,
    policy_id: Optional[str] = None,
) -> Policy:
    """Build a policy with sensible defaults."""
    kwargs = {}
    if policy_id:
        kwargs["id"] = policy_id
    return Policy(
        order=order,
        scope=scope,
        rule=build_rule(kind, subject),
        owner_id=owner_id,
        description=f"{kind} {subject or ''}".strip(),
        **kwargs,
    )


class CountingPolicy:
    """Wraps a policy and counts resolve() calls."""

    def __init__(self, policy: Policy):
        self.policy = policy
        self.calls = 0

    @property
    def id(self) -> str:
        return self.policy.id

    @property
    def is_public(self) -> bool:
        return self.policy.is_public

    def resolve(self, from_iris: Sequence[str], activity_type: str) -> Tuple[Permit, str]:
        self.calls += 1
        return self.policy.resolve(from_iris, activity_type)


class StaticPolicyStore(IPolicyStore):
    """Policy store returning a fixed, pre-ordered collection."""

    def __init__(self, policies: List):
        self.policies = policies
        self.reads = 0

    async def get_ordered_policies(self, uow, target_user_id, purpose=FEDERATED_BLOCK_PURPOSE):
        uow.ensure_active()
        self.reads += 1
        return list(self.policies)

    async def instance_policies(self, uow, purpose=FEDERATED_BLOCK_PURPOSE):
        return list(self.policies)

    async def user_policies(self, uow, user_id, purpose=FEDERATED_BLOCK_PURPOSE):
        return []

    async def get_policy(self, uow, policy_id):
        return None

    async def insert_policy(self, uow, policy):
        raise NotImplementedError

    async def update_policy(self, uow, policy):
        raise NotImplementedError


@pytest.fixture
def memory_database():
    """Create an empty in-memory database."""
    return MemoryDatabase()


@pytest.fixture
def policy_service(memory_database):
    """Create PolicyService on the in-memory backend."""
    return PolicyService(
        database=memory_database,
        policy_store=MemoryPolicyStore(),
        resolution_sink=MemoryResolutionSink(),
    )


@pytest.fixture
def static_service(memory_database):
    """Factory for a PolicyService reading a fixed policy collection."""

    def _create(policies: List) -> PolicyService:
        return PolicyService(
            database=memory_database,
            policy_store=StaticPolicyStore(policies),
            resolution_sink=MemoryResolutionSink(),
        )

    return _create
