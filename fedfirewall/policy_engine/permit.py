"""Three-valued permit lattice."""

from enum import Enum
from functools import reduce
from typing import Iterable


class Permit(str, Enum):
    """Verdict produced by one policy.

    Ordered by decisiveness: deny over grant over unknown.
    """

    DENY = "deny"
    GRANT = "grant"
    UNKNOWN = "unknown"

    def compose(self, other: "Permit") -> "Permit":
        """Return the more decisive of the two permits."""
        return compose(self, other)


def compose(a: Permit, b: Permit) -> Permit:
    """
    Compose two permits.

    Deny absorbs everything, unknown is the identity element.

    Args:
        a: Left permit
        b: Right permit

    Returns:
        The more decisive permit
    """
    if a is Permit.DENY or b is Permit.DENY:
        return Permit.DENY
    if a is Permit.GRANT or b is Permit.GRANT:
        return Permit.GRANT
    return Permit.UNKNOWN


def compose_all(permits: Iterable[Permit]) -> Permit:
    """Fold a sequence of permits, starting from unknown."""
    return reduce(compose, permits, Permit.UNKNOWN)
