"""Domain-specific exceptions."""

from __future__ import annotations


class FlowStateError(Exception):
    """Raised when a flow operation is invoked from a state that does not allow it."""


class CollaboratorError(Exception):
    """Raised by collaborator implementations when a remote call cannot be completed."""


class RequestRejectedError(CollaboratorError):
    """Raised when the backend refuses a request for a business reason."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
