class FirewallException(Exception):
    """Base exception for firewall errors."""

    code = "FIREWALL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to the error payload returned by the API."""
        return {"code": self.code, "message": self.message, "details": self.details}


class ConfigurationError(FirewallException):
    """The policy configuration cannot produce a decision.

    Raised for an empty policy collection, an unrecognized policy kind, a
    policy whose scope and owner disagree, a duplicate order, and an outcome
    that is still unknown after every policy was evaluated. Callers must
    reject the activity.
    """

    code = "CONFIGURATION_ERROR"
    status_code = 409


class PersistenceError(FirewallException):
    """Reading policies or writing resolutions failed."""

    code = "PERSISTENCE_ERROR"
    status_code = 503


class TransactionAbortedError(PersistenceError):
    """The unit of work was aborted before the evaluation finished."""

    code = "TRANSACTION_ABORTED"


class MalformedInputError(FirewallException):
    """An activity IRI could not be parsed."""

    code = "MALFORMED_INPUT"
    status_code = 400
