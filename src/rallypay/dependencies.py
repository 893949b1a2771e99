"""Wiring helpers building the core objects from settings."""

from __future__ import annotations

from typing import Optional, Sequence

from .application.completion.flow import BalanceCallback, PurchaseConfirmationFlow
from .application.completion.rewards import StakePoolPreviewer
from .application.payment.selection import (
    PaymentChangeCallback,
    PaymentSelectionController,
)
from .domain.completion.entities import Participant
from .domain.payment.entities import PaymentRequest
from .domain.shared import (
    BalanceProviderProtocol,
    CommitOperationProtocol,
    NotifierProtocol,
    OutcomePreviewerProtocol,
)
from .env import Settings, get_settings
from .infrastructure.backend.backend_client import AsyncBackendClient
from .infrastructure.notifications import LoggingNotifier, OutcomeNotifier


def get_backend_client(settings: Optional[Settings] = None) -> AsyncBackendClient:
    """Get backend client with settings."""
    settings = settings or get_settings()
    return AsyncBackendClient(
        settings.backend_base_url,
        api_key=settings.backend_api_key,
        timeout=settings.http_timeout,
    )


def get_selection_controller(
    service_cost: int,
    available_tokens: int,
    on_payment_change: Optional[PaymentChangeCallback] = None,
    settings: Optional[Settings] = None,
) -> PaymentSelectionController:
    """Get a selection controller priced at the configured token rate."""
    settings = settings or get_settings()
    request = PaymentRequest(
        service_cost=service_cost,
        available_tokens=available_tokens,
        token_rate=settings.token_rate,
    )
    return PaymentSelectionController(
        request,
        on_payment_change,
        minimum_cash_charge=settings.minimum_cash_charge,
    )


def get_stake_pool_previewer(
    session_id: str,
    participants: Sequence[Participant],
    settings: Optional[Settings] = None,
) -> StakePoolPreviewer:
    """Get a stake-pool previewer charging the configured platform fee."""
    settings = settings or get_settings()
    return StakePoolPreviewer(
        session_id, participants, platform_fee_rate=settings.platform_fee_rate
    )


def get_confirmation_flow(
    previewer: OutcomePreviewerProtocol,
    committer: CommitOperationProtocol,
    *,
    balance_provider: Optional[BalanceProviderProtocol] = None,
    notifier: Optional[NotifierProtocol] = None,
    on_balance_change: Optional[BalanceCallback] = None,
    settings: Optional[Settings] = None,
) -> PurchaseConfirmationFlow:
    """Get a confirmation flow; notifications go to the log unless a notifier is given."""
    settings = settings or get_settings()
    return PurchaseConfirmationFlow(
        previewer,
        committer,
        balance_provider=balance_provider,
        observer=OutcomeNotifier(notifier or LoggingNotifier()),
        on_balance_change=on_balance_change,
        timeout=settings.flow_timeout,
    )
