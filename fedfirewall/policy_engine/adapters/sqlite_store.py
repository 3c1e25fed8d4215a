"""SQLite-backed policy store and resolution sink adapters."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import aiosqlite

from fedfirewall.core.exceptions import ConfigurationError, PersistenceError
from fedfirewall.core.utils.decorators import log_execution_time
from fedfirewall.policy_engine.policies import FEDERATED_BLOCK_PURPOSE, Policy, PolicyScope
from fedfirewall.policy_engine.ports.policy_store_port import IPolicyStore
from fedfirewall.policy_engine.ports.resolution_sink_port import IResolutionSink
from fedfirewall.policy_engine.ports.unit_of_work_port import IDatabase, IUnitOfWork
from fedfirewall.policy_engine.resolution import Resolution

logger = logging.getLogger(__name__)

_POLICY_COLUMNS = "id, purpose, scope, owner_id, position, description, subject, kind"


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    """Translate driver errors into PersistenceError."""
    try:
        yield
    except aiosqlite.Error as e:
        logger.error(f"{operation} failed: {e}")
        raise PersistenceError(f"{operation} failed: {e}", {"operation": operation}) from e


class SQLiteDatabase(IDatabase):
    """Manages the SQLite database holding policies and resolutions."""

    def __init__(self, db_path: str = "fedfirewall.db"):
        self.db_path = db_path

    async def initialize(self):
        """Create database tables if they don't exist."""
        with _storage_errors("initialize"):
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS policies (
                        id TEXT PRIMARY KEY,
                        purpose TEXT NOT NULL,
                        scope TEXT NOT NULL,
                        owner_id TEXT NOT NULL DEFAULT '',
                        position INTEGER NOT NULL,
                        description TEXT NOT NULL DEFAULT '',
                        subject TEXT NOT NULL DEFAULT '',
                        kind TEXT NOT NULL,
                        UNIQUE (purpose, scope, owner_id, position)
                    )
                """)

                # Append-only audit trail
                await db.execute("""
                    CREATE TABLE IF NOT EXISTS resolutions (
                        id TEXT PRIMARY KEY,
                        target_user_id TEXT NOT NULL,
                        permit TEXT NOT NULL,
                        activity_id TEXT NOT NULL,
                        position INTEGER NOT NULL,
                        is_public INTEGER NOT NULL,
                        reason TEXT NOT NULL,
                        policy_id TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)

                await db.execute("""
                    CREATE INDEX IF NOT EXISTS idx_policies_owner
                    ON policies(purpose, scope, owner_id)
                """)
                await db.execute("""
                    CREATE INDEX IF NOT EXISTS idx_resolutions_target
                    ON resolutions(target_user_id)
                """)

                await db.commit()

    def unit_of_work(self) -> "SQLiteUnitOfWork":
        return SQLiteUnitOfWork(self.db_path)


class SQLiteUnitOfWork(IUnitOfWork):
    """One connection and one explicit transaction."""

    def __init__(self, db_path: str):
        super().__init__()
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise PersistenceError("unit of work has not been started")
        return self._connection

    async def begin(self) -> None:
        with _storage_errors("begin"):
            self._connection = await aiosqlite.connect(self.db_path, isolation_level=None)
            self._connection.row_factory = aiosqlite.Row
            try:
                await self._connection.execute("BEGIN")
            except BaseException:
                await self._close()
                raise

    async def commit(self) -> None:
        try:
            with _storage_errors("commit"):
                await self.connection.execute("COMMIT")
        finally:
            await self._close()

    async def rollback(self) -> None:
        if self._connection is None:
            return
        try:
            with _storage_errors("rollback"):
                await self._connection.execute("ROLLBACK")
        finally:
            await self._close()

    async def _close(self) -> None:
        if self._connection is not None:
            connection, self._connection = self._connection, None
            await connection.close()


def _policy_from_row(row: aiosqlite.Row) -> Policy:
    data: Dict[str, Any] = dict(row)
    data["order"] = data.pop("position")
    return Policy.load(data)


class SQLitePolicyStore(IPolicyStore):
    """Policy store on top of SQLiteDatabase."""

    async def _select(self, uow: SQLiteUnitOfWork, where: str, params: tuple) -> List[Policy]:
        uow.ensure_active()
        with _storage_errors("select policies"):
            async with uow.connection.execute(
                f"SELECT {_POLICY_COLUMNS} FROM policies WHERE {where} ORDER BY position ASC", params
            ) as cursor:
                rows = await cursor.fetchall()
        return [_policy_from_row(row) for row in rows]

    async def instance_policies(
        self, uow: SQLiteUnitOfWork, purpose: str = FEDERATED_BLOCK_PURPOSE
    ) -> List[Policy]:
        return await self._select(uow, "purpose = ? AND scope = ?", (purpose, PolicyScope.INSTANCE.value))

    async def user_policies(
        self, uow: SQLiteUnitOfWork, user_id: str, purpose: str = FEDERATED_BLOCK_PURPOSE
    ) -> List[Policy]:
        return await self._select(
            uow, "purpose = ? AND scope = ? AND owner_id = ?", (purpose, PolicyScope.USER.value, user_id)
        )

    async def get_policy(self, uow: SQLiteUnitOfWork, policy_id: str) -> Optional[Policy]:
        uow.ensure_active()
        with _storage_errors("select policy"):
            async with uow.connection.execute(
                f"SELECT {_POLICY_COLUMNS} FROM policies WHERE id = ?", (policy_id,)
            ) as cursor:
                row = await cursor.fetchone()
        return _policy_from_row(row) if row else None

    @staticmethod
    def _params(policy: Policy) -> tuple:
        return (
            policy.purpose,
            policy.scope.value,
            policy.owner_id or "",
            policy.order,
            policy.description,
            policy.subject,
            policy.kind.value,
            policy.id,
        )

    @log_execution_time(log_level="debug")
    async def insert_policy(self, uow: SQLiteUnitOfWork, policy: Policy) -> str:
        uow.ensure_active()
        try:
            with _storage_errors("insert policy"):
                await uow.connection.execute(
                    """
                    INSERT INTO policies
                    (purpose, scope, owner_id, position, description, subject, kind, id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    self._params(policy),
                )
        except PersistenceError as e:
            if isinstance(e.__cause__, aiosqlite.IntegrityError):
                raise ConfigurationError(
                    f"policy {policy.id} conflicts with an existing policy: {e.__cause__}",
                    {"policy_id": policy.id, "order": policy.order},
                ) from e.__cause__
            raise
        return policy.id

    @log_execution_time(log_level="debug")
    async def update_policy(self, uow: SQLiteUnitOfWork, policy: Policy) -> None:
        uow.ensure_active()
        try:
            with _storage_errors("update policy"):
                cursor = await uow.connection.execute(
                    """
                    UPDATE policies
                    SET purpose = ?, scope = ?, owner_id = ?, position = ?,
                        description = ?, subject = ?, kind = ?
                    WHERE id = ?
                    """,
                    self._params(policy),
                )
        except PersistenceError as e:
            if isinstance(e.__cause__, aiosqlite.IntegrityError):
                raise ConfigurationError(
                    f"policy {policy.id} conflicts with an existing policy: {e.__cause__}",
                    {"policy_id": policy.id, "order": policy.order},
                ) from e.__cause__
            raise
        if cursor.rowcount != 1:
            raise ConfigurationError(f"policy {policy.id} does not exist", {"policy_id": policy.id})


class SQLiteResolutionSink(IResolutionSink):
    """Append-only resolution sink on top of SQLiteDatabase."""

    @log_execution_time(log_level="debug")
    async def insert_resolutions(self, uow: SQLiteUnitOfWork, resolutions: Sequence[Resolution]) -> None:
        uow.ensure_active()
        if not resolutions:
            return

        batch_data = [
            (
                r.id,
                r.target_user_id,
                r.permit.value,
                r.activity_id,
                r.order,
                1 if r.is_public else 0,
                r.reason,
                r.policy_id,
                r.created_at.isoformat(),
            )
            for r in resolutions
        ]
        with _storage_errors("insert resolutions"):
            await uow.connection.executemany(
                """
                INSERT INTO resolutions
                (id, target_user_id, permit, activity_id, position, is_public, reason, policy_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                batch_data,
            )

    async def user_resolutions(self, uow: SQLiteUnitOfWork, user_id: str) -> List[Resolution]:
        uow.ensure_active()
        with _storage_errors("select resolutions"):
            async with uow.connection.execute(
                """
                SELECT id, target_user_id, permit, activity_id, position AS "order",
                       is_public, reason, policy_id, created_at
                FROM resolutions
                WHERE target_user_id = ?
                ORDER BY rowid ASC
                """,
                (user_id,),
            ) as cursor:
                rows = await cursor.fetchall()
        return [Resolution.from_row(dict(row)) for row in rows]
