"""Failure kinds a mutation can end with.

Each kind maps to one HTTP status in the REST adapter. ``Internal`` carries a
fixed, opaque message; the underlying database error is only ever logged.
"""


class MutationError(Exception):
    kind = "internal"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(MutationError):
    kind = "invalid_input"
    default_message = "Invalid input"


class NotFound(MutationError):
    kind = "not_found"
    default_message = "Not found"


class Conflict(MutationError):
    kind = "conflict"
    default_message = "Conflict"


class VotingClosed(MutationError):
    kind = "voting_closed"
    default_message = "Voting is closed"


class Internal(MutationError):
    pass
