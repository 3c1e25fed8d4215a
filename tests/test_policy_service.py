"""
Unit tests for PolicyService on the in-memory backend.
"""

import pytest

from conftest import ACTIVITY_ID, TARGET_USER, CountingPolicy, StaticPolicyStore, make_policy
from fedfirewall.core.exceptions import (
    ConfigurationError,
    MalformedInputError,
    PersistenceError,
    TransactionAbortedError,
)
from fedfirewall.policy_engine.adapters.memory_store import MemoryPolicyStore, MemoryResolutionSink
from fedfirewall.policy_engine.permit import Permit
from fedfirewall.policy_engine.policies import PolicyScope
from fedfirewall.policy_engine.policy_service import PolicyService, parse_activity_id

BAD = "https://bad.example/users/troll"
GOOD = "https://good.example/users/friend"


class FailingResolutionSink(MemoryResolutionSink):
    """Sink whose writes always fail."""

    async def insert_resolutions(self, uow, resolutions):
        raise PersistenceError("disk full")


class AbortingPolicyStore(StaticPolicyStore):
    """Store that aborts the unit of work after handing out policies."""

    async def get_ordered_policies(self, uow, target_user_id, purpose="federated_block"):
        policies = await super().get_ordered_policies(uow, target_user_id, purpose)
        uow.abort("caller cancelled")
        return policies


class TestIsBlocked:
    """Test cases for PolicyService.is_blocked / evaluate."""

    @pytest.mark.asyncio
    async def test_always_grant(self, static_service, memory_database):
        service = static_service([make_policy("always_grant")])

        blocked = await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert blocked is False
        assert [r.permit for r in memory_database.resolutions] == [Permit.GRANT]

    @pytest.mark.asyncio
    async def test_always_deny(self, static_service, memory_database):
        service = static_service([make_policy("always_deny")])

        blocked = await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert blocked is True
        assert [r.permit for r in memory_database.resolutions] == [Permit.DENY]

    @pytest.mark.asyncio
    async def test_bad_host_denied_both_recorded(self, static_service, memory_database):
        service = static_service(
            [
                make_policy("instance_grant", "good.example", order=0),
                make_policy("instance_deny", "bad.example", order=1),
            ]
        )

        decision = await service.evaluate(TARGET_USER, [BAD], ACTIVITY_ID, "Create")

        assert decision.blocked is True
        assert decision.outcome is Permit.DENY
        assert [r.permit for r in memory_database.resolutions] == [Permit.UNKNOWN, Permit.DENY]

    @pytest.mark.asyncio
    async def test_good_host_granted_both_recorded(self, static_service, memory_database):
        service = static_service(
            [
                make_policy("instance_grant", "good.example", order=0),
                make_policy("instance_deny", "bad.example", order=1),
            ]
        )

        decision = await service.evaluate(TARGET_USER, [GOOD], ACTIVITY_ID, "Create")

        assert decision.blocked is False
        assert [r.permit for r in memory_database.resolutions] == [Permit.GRANT, Permit.UNKNOWN]

    @pytest.mark.asyncio
    async def test_empty_policies(self, static_service, memory_database):
        service = static_service([])

        with pytest.raises(ConfigurationError) as exc_info:
            await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert exc_info.value.message == "no policies to evaluate"
        assert memory_database.resolutions == []

    @pytest.mark.asyncio
    async def test_first_deny_skips_the_rest(self, static_service, memory_database):
        policies = [
            CountingPolicy(make_policy("always_deny", order=0)),
            CountingPolicy(make_policy("always_grant", order=1)),
            CountingPolicy(make_policy("instance_grant", "good.example", order=2)),
        ]
        service = static_service(policies)

        assert await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow") is True
        assert policies[1].calls == 0
        assert policies[2].calls == 0
        assert len(memory_database.resolutions) == 1

    @pytest.mark.asyncio
    async def test_unknown_outcome_persists_then_fails(self, static_service, memory_database):
        service = static_service(
            [
                make_policy("instance_deny", "bad.example", order=0),
                make_policy("actor_deny", BAD, order=1),
            ]
        )

        with pytest.raises(ConfigurationError) as exc_info:
            await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert exc_info.value.message == "unknown resolution after evaluating all policies"
        assert [r.permit for r in memory_database.resolutions] == [Permit.UNKNOWN, Permit.UNKNOWN]
        assert exc_info.value.details["resolution_ids"] == [r.id for r in memory_database.resolutions]

    @pytest.mark.asyncio
    async def test_malformed_activity_id(self, static_service, memory_database):
        service = static_service([make_policy("always_grant")])

        with pytest.raises(MalformedInputError):
            await service.is_blocked(TARGET_USER, [GOOD], "not-an-iri", "Follow")

        assert memory_database.resolutions == []

    @pytest.mark.asyncio
    async def test_sink_failure_propagates(self, memory_database):
        service = PolicyService(
            database=memory_database,
            policy_store=StaticPolicyStore([make_policy("always_deny")]),
            resolution_sink=FailingResolutionSink(),
        )

        with pytest.raises(PersistenceError):
            await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert memory_database.resolutions == []

    @pytest.mark.asyncio
    async def test_aborted_scope_writes_nothing(self, memory_database):
        service = PolicyService(
            database=memory_database,
            policy_store=AbortingPolicyStore([make_policy("always_deny")]),
            resolution_sink=MemoryResolutionSink(),
        )

        with pytest.raises(TransactionAbortedError):
            await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert memory_database.resolutions == []

    @pytest.mark.asyncio
    async def test_redelivery_appends_new_records(self, static_service, memory_database):
        service = static_service([make_policy("always_grant", policy_id="p-1")])

        await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")
        await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        first, second = memory_database.resolutions
        assert (first.activity_id, first.policy_id) == (second.activity_id, second.policy_id)
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_policies_reread_every_call(self, static_service):
        service = static_service([make_policy("always_grant")])

        await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")
        await service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")

        assert service.policy_store.reads == 2


class TestPolicyAdministration:
    """Test cases for policy administration through the memory store."""

    @pytest.mark.asyncio
    async def test_instance_policies_evaluated_before_user_policies(self, policy_service, memory_database):
        await policy_service.add_policy(
            make_policy("actor_deny", BAD, order=0, scope=PolicyScope.USER, owner_id=TARGET_USER)
        )
        await policy_service.add_policy(make_policy("instance_deny", "bad.example", order=7))

        decision = await policy_service.evaluate(TARGET_USER, [BAD], ACTIVITY_ID, "Follow")

        assert decision.blocked is True
        assert len(decision.resolutions) == 1
        assert decision.resolutions[0].is_public is True

    @pytest.mark.asyncio
    async def test_other_users_policies_ignored(self, policy_service):
        await policy_service.add_policy(make_policy("always_grant", order=0))
        await policy_service.add_policy(
            make_policy("always_deny", order=0, scope=PolicyScope.USER, owner_id="bob")
        )

        assert await policy_service.is_blocked(TARGET_USER, [BAD], ACTIVITY_ID, "Follow") is False
        assert await policy_service.is_blocked("bob", [BAD], ACTIVITY_ID, "Follow") is True

    @pytest.mark.asyncio
    async def test_new_policy_applies_to_next_evaluation(self, policy_service):
        await policy_service.add_policy(make_policy("always_grant", order=0))
        assert await policy_service.is_blocked(TARGET_USER, [BAD], ACTIVITY_ID, "Follow") is False

        await policy_service.add_policy(make_policy("instance_deny", "bad.example", order=1))

        assert await policy_service.is_blocked(TARGET_USER, [BAD], ACTIVITY_ID, "Follow") is True

    @pytest.mark.asyncio
    async def test_duplicate_order_rejected(self, policy_service):
        await policy_service.add_policy(make_policy("always_grant", order=0))

        with pytest.raises(ConfigurationError):
            await policy_service.add_policy(make_policy("always_deny", order=0))

        assert len(await policy_service.instance_policies()) == 1

    @pytest.mark.asyncio
    async def test_update_policy(self, policy_service):
        await policy_service.add_policy(make_policy("always_grant", order=0, policy_id="p-1"))

        await policy_service.update_policy(make_policy("always_deny", order=0, policy_id="p-1"))

        policy = await policy_service.get_policy("p-1")
        assert policy.kind.value == "always_deny"

    @pytest.mark.asyncio
    async def test_update_missing_policy(self, policy_service):
        with pytest.raises(ConfigurationError):
            await policy_service.update_policy(make_policy("always_deny", policy_id="missing"))

    @pytest.mark.asyncio
    async def test_sync_policies_upserts(self, policy_service):
        await policy_service.add_policy(make_policy("always_grant", order=0, policy_id="p-1"))

        count = await policy_service.sync_policies(
            [
                make_policy("always_deny", order=0, policy_id="p-1"),
                make_policy("actor_grant", GOOD, order=0, scope=PolicyScope.USER, owner_id="bob", policy_id="p-2"),
            ]
        )

        assert count == 2
        assert [p.kind.value for p in await policy_service.instance_policies()] == ["always_deny"]
        assert [p.id for p in await policy_service.user_policies("bob")] == ["p-2"]

    @pytest.mark.asyncio
    async def test_user_resolutions(self, policy_service):
        await policy_service.add_policy(make_policy("always_grant", order=0))
        await policy_service.is_blocked(TARGET_USER, [GOOD], ACTIVITY_ID, "Follow")
        await policy_service.is_blocked("bob", [GOOD], ACTIVITY_ID, "Follow")

        resolutions = await policy_service.user_resolutions(TARGET_USER)

        assert len(resolutions) == 1
        assert resolutions[0].target_user_id == TARGET_USER


class TestParseActivityId:
    """Test cases for parse_activity_id."""

    def test_absolute_iri(self):
        assert parse_activity_id(ACTIVITY_ID) == ACTIVITY_ID

    @pytest.mark.parametrize("value", ["", "relative/path", "https://", "http://[::1"])
    def test_malformed(self, value):
        with pytest.raises(MalformedInputError):
            parse_activity_id(value)


class TestAbortedReads:
    """Reads through an aborted unit of work fail like writes do."""

    @pytest.mark.asyncio
    async def test_get_policy(self, memory_database):
        with pytest.raises(TransactionAbortedError):
            async with memory_database.unit_of_work() as uow:
                uow.abort("caller cancelled")
                await MemoryPolicyStore().get_policy(uow, "p-1")

    @pytest.mark.asyncio
    async def test_user_resolutions(self, memory_database):
        with pytest.raises(TransactionAbortedError):
            async with memory_database.unit_of_work() as uow:
                uow.abort("caller cancelled")
                await MemoryResolutionSink().user_resolutions(uow, TARGET_USER)
