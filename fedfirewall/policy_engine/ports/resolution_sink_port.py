"""Port for the resolution audit trail."""

from abc import ABC, abstractmethod
from typing import List, Sequence

from fedfirewall.policy_engine.ports.unit_of_work_port import IUnitOfWork
from fedfirewall.policy_engine.resolution import Resolution


class IResolutionSink(ABC):
    """Interface for append-only resolution storage."""

    @abstractmethod
    async def insert_resolutions(self, uow: IUnitOfWork, resolutions: Sequence[Resolution]) -> None:
        """
        Append a batch of resolutions.

        Args:
            uow: Current unit of work
            resolutions: Every resolution computed by one evaluation

        Raises:
            PersistenceError: If the batch cannot be written
        """
        pass

    @abstractmethod
    async def user_resolutions(self, uow: IUnitOfWork, user_id: str) -> List[Resolution]:
        """Get the resolutions recorded for activities addressed to an actor, oldest first."""
        pass
