"""Typed failures raised by the trash lifecycle services.

Every failure is raised before any row is changed, so callers can surface
it without worrying about a half-applied cascade.
"""


class LifecycleError(Exception):
    """Base class for lifecycle failures."""

    code = "lifecycle_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LifecycleError):
    """Entity is missing or outside the actor's tenant scope."""

    code = "not_found"


class Forbidden(LifecycleError):
    """Actor is not allowed to perform the operation."""

    code = "forbidden"


class InvalidState(LifecycleError):
    """Operation is not legal for the entity's current lifecycle state."""

    code = "invalid_state"


class PreconditionFailed(LifecycleError):
    """A trashed ancestor blocks the operation."""

    code = "precondition_failed"
