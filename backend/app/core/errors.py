"""Errors raised by the task core and surfaced to the API layer."""


class TaskCoreError(Exception):
    """Base class for all task core failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(TaskCoreError):
    """A referenced task, label or edge does not exist."""


class InvalidArgumentError(TaskCoreError):
    """Malformed enum value, self-dependency or other rejected input."""


class ConflictError(TaskCoreError):
    """Duplicate dependency edge, label assignment or label name."""


class StorageFailureError(TaskCoreError):
    """Transaction or constraint failure not otherwise classified."""
