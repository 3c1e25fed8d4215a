"""Port for policy storage."""

from abc import ABC, abstractmethod
from typing import List, Optional

from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE, Policy
from fedfirewall.policy_engine.ports.unit_of_work_port import IUnitOfWork


class IPolicyStore(ABC):
    """Interface for loading and administering policies."""

    async def get_ordered_policies(
        self, uow: IUnitOfWork, target_user_id: str, purpose: str = FEDERATED_BLOCK_PURPOSE
    ) -> List[Policy]:
        """
        Get the policies that govern activities addressed to an actor.

        Instance policies come first, then the actor's own policies, each
        group ascending by order.

        Args:
            uow: Current unit of work
            target_user_id: Local actor the activity is addressed to
            purpose: Decision category

        Returns:
            Ordered list of policies
        """
        instance = await self.instance_policies(uow, purpose)
        user = await self.user_policies(uow, target_user_id, purpose)
        return instance + user

    @abstractmethod
    async def instance_policies(self, uow: IUnitOfWork, purpose: str = FEDERATED_BLOCK_PURPOSE) -> List[Policy]:
        """Get instance-wide policies ascending by order."""
        pass

    @abstractmethod
    async def user_policies(
        self, uow: IUnitOfWork, user_id: str, purpose: str = FEDERATED_BLOCK_PURPOSE
    ) -> List[Policy]:
        """Get one actor's policies ascending by order."""
        pass

    @abstractmethod
    async def get_policy(self, uow: IUnitOfWork, policy_id: str) -> Optional[Policy]:
        """Get a policy by ID, or None if it does not exist."""
        pass

    @abstractmethod
    async def insert_policy(self, uow: IUnitOfWork, policy: Policy) -> str:
        """
        Store a new policy.

        Returns:
            Policy ID

        Raises:
            ConfigurationError: If the order is already taken in its group
        """
        pass

    @abstractmethod
    async def update_policy(self, uow: IUnitOfWork, policy: Policy) -> None:
        """
        Replace an existing policy.

        Raises:
            ConfigurationError: If the policy does not exist or the order is taken
        """
        pass
