"""Port for the transactional scope of one evaluation."""

from abc import ABC, abstractmethod
from typing import Optional

from fedfirewall.core.exceptions import TransactionAbortedError


class IUnitOfWork(ABC):
    """Interface for a unit of work (SQLite transaction, in-memory staging, etc.).

    Used as an async context manager: commits on clean exit, rolls back on
    any exception, including cancellation.
    """

    def __init__(self) -> None:
        self._abort_reason: Optional[str] = None

    async def __aenter__(self) -> "IUnitOfWork":
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self._abort_reason is None:
            await self.commit()
            return
        await self.rollback()
        if exc_type is None:
            self.ensure_active()

    def abort(self, reason: str = "aborted") -> None:
        """Mark the unit of work as aborted. Nothing further will be written."""
        self._abort_reason = reason

    @property
    def aborted(self) -> bool:
        return self._abort_reason is not None

    def ensure_active(self) -> None:
        """
        Fail if the unit of work was aborted.

        Raises:
            TransactionAbortedError: If abort() was called
        """
        if self._abort_reason is not None:
            raise TransactionAbortedError(
                f"unit of work aborted: {self._abort_reason}", {"reason": self._abort_reason}
            )

    @abstractmethod
    async def begin(self) -> None:
        """Open the transactional scope."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Make every write of this scope durable."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every write of this scope."""
        pass


class IDatabase(ABC):
    """Interface for a storage backend handing out units of work."""

    async def initialize(self) -> None:
        """Prepare the backend (create tables, etc.)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> IUnitOfWork:
        """
        Create a new unit of work.

        Returns:
            Unit of work, to be used with ``async with``
        """
        pass
