"""Memory-based policy store and resolution sink adapters."""

from typing import Dict, List, Optional, Sequence

from fedfirewall.core.exceptions import ConfigurationError
from fedfirewall.core.utils.decorators import log_execution_time
from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE, Policy, PolicyScope
from fedfirewall.policy_engine.ports.policy_store_port import IPolicyStore
from fedfirewall.policy_engine.ports.resolution_sink_port import IResolutionSink
from fedfirewall.policy_engine.ports.unit_of_work_port import IDatabase, IUnitOfWork
from fedfirewall.policy_engine.resolution import Resolution


class MemoryDatabase(IDatabase):
    """In-memory storage backend.

    Writes are staged on the unit of work and applied on commit.
    """

    def __init__(self):
        """Initialize empty tables."""
        self.policies: Dict[str, Policy] = {}
        self.resolutions: List[Resolution] = []

    def unit_of_work(self) -> "MemoryUnitOfWork":
        return MemoryUnitOfWork(self)


class MemoryUnitOfWork(IUnitOfWork):
    """Unit of work staging writes against a MemoryDatabase."""

    def __init__(self, database: MemoryDatabase):
        super().__init__()
        self.database = database
        self.staged_policies: Dict[str, Policy] = {}
        self.staged_resolutions: List[Resolution] = []
        self.committed = False
        self.rolled_back = False

    async def begin(self) -> None:
        self.staged_policies.clear()
        self.staged_resolutions.clear()

    async def commit(self) -> None:
        self.database.policies.update(self.staged_policies)
        self.database.resolutions.extend(self.staged_resolutions)
        self.committed = True

    async def rollback(self) -> None:
        self.staged_policies.clear()
        self.staged_resolutions.clear()
        self.rolled_back = True

    def policies(self) -> Dict[str, Policy]:
        """Committed policies overlaid with this scope's staged writes."""
        return {**self.database.policies, **self.staged_policies}


def _group_key(policy: Policy):
    return policy.purpose, policy.scope, policy.owner_id


class MemoryPolicyStore(IPolicyStore):
    """In-memory policy store implementation."""

    async def instance_policies(
        self, uow: MemoryUnitOfWork, purpose: str = FEDERATED_BLOCK_PURPOSE
    ) -> List[Policy]:
        uow.ensure_active()
        policies = [
            p for p in uow.policies().values() if p.scope is PolicyScope.INSTANCE and p.purpose == purpose
        ]
        return sorted(policies, key=lambda p: p.order)

    async def user_policies(
        self, uow: MemoryUnitOfWork, user_id: str, purpose: str = FEDERATED_BLOCK_PURPOSE
    ) -> List[Policy]:
        uow.ensure_active()
        policies = [
            p
            for p in uow.policies().values()
            if p.scope is PolicyScope.USER and p.owner_id == user_id and p.purpose == purpose
        ]
        return sorted(policies, key=lambda p: p.order)

    async def get_policy(self, uow: MemoryUnitOfWork, policy_id: str) -> Optional[Policy]:
        uow.ensure_active()
        return uow.policies().get(policy_id)

    @log_execution_time(log_level="debug")
    async def insert_policy(self, uow: MemoryUnitOfWork, policy: Policy) -> str:
        uow.ensure_active()
        if policy.id in uow.policies():
            raise ConfigurationError(f"policy {policy.id} already exists", {"policy_id": policy.id})
        self._check_order(uow, policy)
        uow.staged_policies[policy.id] = policy
        return policy.id

    @log_execution_time(log_level="debug")
    async def update_policy(self, uow: MemoryUnitOfWork, policy: Policy) -> None:
        uow.ensure_active()
        if policy.id not in uow.policies():
            raise ConfigurationError(f"policy {policy.id} does not exist", {"policy_id": policy.id})
        self._check_order(uow, policy)
        uow.staged_policies[policy.id] = policy

    def _check_order(self, uow: MemoryUnitOfWork, policy: Policy) -> None:
        for other in uow.policies().values():
            if other.id != policy.id and _group_key(other) == _group_key(policy) and other.order == policy.order:
                raise ConfigurationError(
                    f"order {policy.order} is already used by policy {other.id}",
                    {"policy_id": policy.id, "order": policy.order},
                )


class MemoryResolutionSink(IResolutionSink):
    """In-memory, append-only resolution sink."""

    @log_execution_time(log_level="debug")
    async def insert_resolutions(self, uow: MemoryUnitOfWork, resolutions: Sequence[Resolution]) -> None:
        uow.ensure_active()
        uow.staged_resolutions.extend(resolutions)

    async def user_resolutions(self, uow: MemoryUnitOfWork, user_id: str) -> List[Resolution]:
        uow.ensure_active()
        return [r for r in uow.database.resolutions if r.target_user_id == user_id]
