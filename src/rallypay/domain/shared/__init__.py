"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .collaborator_protocols import (
    BalanceProviderProtocol,
    CommitOperationProtocol,
    FlowObserverProtocol,
    NotificationKind,
    NotifierProtocol,
    OutcomePreviewerProtocol,
)

__all__ = [
    "BalanceProviderProtocol",
    "CommitOperationProtocol",
    "FlowObserverProtocol",
    "NotificationKind",
    "NotifierProtocol",
    "OutcomePreviewerProtocol",
]
