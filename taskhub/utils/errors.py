"""Error handling utilities."""

from typing import Optional


class TaskHubError(Exception):
    """Base exception for taskhub."""
    pass


class SupabaseError(TaskHubError):
    """Supabase operation error."""
    pass


class TaskServiceError(TaskHubError):
    """
    Error raised by a task service operation.

    The message reads "Error <operation> <entity>: <reason>", e.g.
    "Error creating task: duplicate key value".
    """

    def __init__(self, operation: str, entity: str, reason: str):
        self.operation = operation
        self.entity = entity
        self.reason = reason
        super().__init__(f"Error {operation} {entity}: {reason}")


class NotFoundError(TaskServiceError):
    """Entity lookup returned nothing."""
    pass


class OperationFailedError(TaskServiceError):
    """Store call failed for any other reason."""
    pass


class EntityMissing(TaskHubError):
    """Raised inside an operation when an existence check fails."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity.capitalize()} not found")


def wrap_error(operation: str, entity: str, error: Exception) -> TaskServiceError:
    """Build the wrapped error for a failed operation, keeping its kind."""
    if isinstance(error, EntityMissing):
        return NotFoundError(operation, entity, str(error))
    return OperationFailedError(operation, entity, _describe(error))


def _describe(error: Exception) -> str:
    """Best human-readable message for a store error."""
    message: Optional[str] = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__
