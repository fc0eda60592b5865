"""
Domain exceptions for the change review workflow.

Services raise these; the API layer maps each one to an
HTTP status code. Nothing below the API knows about HTTP.
"""


class WorkflowError(Exception):
    """Base exception for the review workflow."""


class NotFoundError(WorkflowError):
    """A referenced record, entry or notification does not exist."""


class ValidationError(WorkflowError):
    """Input is malformed: negative amounts, unknown fields, empty text."""


class InvalidStateError(WorkflowError):
    """The operation is not legal in the entry's current status."""


class StorageError(WorkflowError):
    """The record store failed. Safe for the caller to retry."""


class ConcurrentEditError(StorageError):
    """The record changed between read and write."""


class ForbiddenError(WorkflowError):
    """The caller may not act on this resource."""
