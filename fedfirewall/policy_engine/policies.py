"""Interaction policies and their per-kind evaluation."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlsplit

from fedfirewall.core.exceptions import ConfigurationError
from fedfirewall.policy_engine.permit import Permit

FEDERATED_BLOCK_PURPOSE = "federated_block"


class PolicyKind(str, Enum):
    """Persisted policy kinds. Matching is exact and case-sensitive."""

    ALWAYS_GRANT = "always_grant"
    ALWAYS_DENY = "always_deny"
    INSTANCE_GRANT = "instance_grant"
    INSTANCE_DENY = "instance_deny"
    ACTOR_GRANT = "actor_grant"
    ACTOR_DENY = "actor_deny"


class PolicyScope(str, Enum):
    """Whether a policy applies to the whole instance or to one actor."""

    INSTANCE = "instance"
    USER = "user"


@dataclass(frozen=True)
class AlwaysGrant:
    kind = PolicyKind.ALWAYS_GRANT


@dataclass(frozen=True)
class AlwaysDeny:
    kind = PolicyKind.ALWAYS_DENY


@dataclass(frozen=True)
class InstanceGrant:
    subject: str
    kind = PolicyKind.INSTANCE_GRANT


@dataclass(frozen=True)
class InstanceDeny:
    subject: str
    kind = PolicyKind.INSTANCE_DENY


@dataclass(frozen=True)
class ActorGrant:
    subject: str
    kind = PolicyKind.ACTOR_GRANT


@dataclass(frozen=True)
class ActorDeny:
    subject: str
    kind = PolicyKind.ACTOR_DENY


Rule = Union[AlwaysGrant, AlwaysDeny, InstanceGrant, InstanceDeny, ActorGrant, ActorDeny]

_SUBJECT_RULES = {
    PolicyKind.INSTANCE_GRANT: InstanceGrant,
    PolicyKind.INSTANCE_DENY: InstanceDeny,
    PolicyKind.ACTOR_GRANT: ActorGrant,
    PolicyKind.ACTOR_DENY: ActorDeny,
}


def build_rule(kind: str, subject: Optional[str] = None) -> Rule:
    """
    Build the rule variant for a persisted kind string.

    Args:
        kind: One of the PolicyKind values
        subject: Hostname or actor IRI, required by the instance and actor kinds

    Returns:
        The rule variant

    Raises:
        ConfigurationError: If the kind is not recognized or a subject is missing
    """
    try:
        policy_kind = PolicyKind(kind)
    except ValueError:
        raise ConfigurationError(f"unknown kind of policy: {kind}", {"kind": kind}) from None

    if policy_kind is PolicyKind.ALWAYS_GRANT:
        return AlwaysGrant()
    if policy_kind is PolicyKind.ALWAYS_DENY:
        return AlwaysDeny()
    if not subject:
        raise ConfigurationError(f"policy kind {kind} requires a subject", {"kind": kind})
    return _SUBJECT_RULES[policy_kind](subject)


def iri_host(iri: str) -> str:
    """Return the host (and port, if any) of an IRI, without userinfo."""
    return urlsplit(iri).netloc.rpartition("@")[2]


def _match_host(from_iris: Sequence[str], host: str) -> Optional[str]:
    for iri in from_iris:
        if iri_host(iri) == host:
            return iri
    return None


def _match_actor(from_iris: Sequence[str], actor: str) -> Optional[str]:
    for iri in from_iris:
        if iri == actor:
            return iri
    return None


def resolve_rule(rule: Rule, from_iris: Sequence[str], activity_type: str) -> Tuple[Permit, str]:
    """
    Evaluate one rule against the sender identities of an activity.

    Identities are scanned in the order given and the first match wins.

    Args:
        rule: Rule variant to evaluate
        from_iris: Sender identities, as IRI strings
        activity_type: Activity type (e.g. "Follow")

    Returns:
        Tuple of permit and a human-readable reason
    """
    match rule:
        case AlwaysGrant():
            return Permit.GRANT, "always permit"
        case AlwaysDeny():
            return Permit.DENY, "always deny"
        case InstanceGrant(subject=host):
            matched = _match_host(from_iris, host)
            if matched is not None:
                return Permit.GRANT, f'"{matched}" matched host "{host}" for instance grant'
            return Permit.UNKNOWN, f'could not match host "{host}" for instance grant'
        case InstanceDeny(subject=host):
            matched = _match_host(from_iris, host)
            if matched is not None:
                return Permit.DENY, f'"{matched}" matched host "{host}" for instance deny'
            return Permit.UNKNOWN, f'could not match host "{host}" for instance deny'
        case ActorGrant(subject=actor):
            matched = _match_actor(from_iris, actor)
            if matched is not None:
                return Permit.GRANT, f'"{matched}" matched actor for grant'
            return Permit.UNKNOWN, f'could not match actor "{actor}" for actor grant'
        case ActorDeny(subject=actor):
            matched = _match_actor(from_iris, actor)
            if matched is not None:
                return Permit.DENY, f'"{matched}" matched actor for deny'
            return Permit.UNKNOWN, f'could not match actor "{actor}" for actor deny'
        case _:
            raise ConfigurationError(f"unsupported policy rule: {rule!r}")


@dataclass(frozen=True)
class Policy:
    """A configured interaction rule.

    ``is_public`` is derived from the scope: instance policies are public,
    user policies are private to their owner.
    """

    order: int
    scope: PolicyScope
    rule: Rule
    owner_id: Optional[str] = None
    description: str = ""
    purpose: str = FEDERATED_BLOCK_PURPOSE
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "scope", PolicyScope(self.scope))
        except ValueError:
            raise ConfigurationError(f"unknown policy scope: {self.scope}", {"policy_id": self.id}) from None
        if self.scope is PolicyScope.USER and not self.owner_id:
            raise ConfigurationError("user policy requires an owner", {"policy_id": self.id})
        if self.scope is PolicyScope.INSTANCE and self.owner_id:
            raise ConfigurationError("instance policy cannot have an owner", {"policy_id": self.id})

    @property
    def is_public(self) -> bool:
        return self.scope is PolicyScope.INSTANCE

    @property
    def kind(self) -> PolicyKind:
        return self.rule.kind

    @property
    def subject(self) -> str:
        return getattr(self.rule, "subject", "")

    def resolve(self, from_iris: Sequence[str], activity_type: str) -> Tuple[Permit, str]:
        """Evaluate this policy's rule."""
        return resolve_rule(self.rule, from_iris, activity_type)

    @classmethod
    def load(cls, data: Mapping[str, Any]) -> "Policy":
        """
        Build a policy from a stored row or a configuration entry.

        Args:
            data: Mapping with order, scope, kind and optionally id, owner_id,
                subject, description and purpose

        Returns:
            Validated policy

        Raises:
            ConfigurationError: If the kind, scope or owner is invalid
        """
        for key in ("order", "scope", "kind"):
            if data.get(key) is None:
                raise ConfigurationError(f"policy is missing {key}", {"policy": dict(data)})
        try:
            order = int(data["order"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"policy order must be an integer: {data['order']!r}", {"policy": dict(data)}
            ) from e
        kwargs: Dict[str, Any] = {
            "order": order,
            "scope": data["scope"],
            "rule": build_rule(data["kind"], data.get("subject")),
            "owner_id": data.get("owner_id") or None,
            "description": data.get("description") or "",
            "purpose": data.get("purpose") or FEDERATED_BLOCK_PURPOSE,
        }
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)

    def to_record(self) -> Dict[str, Any]:
        """Flatten to a serializable mapping."""
        return {
            "id": self.id,
            "order": self.order,
            "scope": self.scope.value,
            "owner_id": self.owner_id,
            "is_public": self.is_public,
            "subject": self.subject,
            "kind": self.kind.value,
            "description": self.description,
            "purpose": self.purpose,
        }
