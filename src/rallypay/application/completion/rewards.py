"""Stake-pool reward previews for social session completion."""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal
from typing import Iterable, Sequence

from ...domain.completion.entities import Participant, RewardPreview, TargetSelection
from ...middleware.timing import log_timing

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM_FEE_RATE = Decimal("0.10")


@log_timing("compute_reward_preview")
def compute_reward_preview(
    stakes: Iterable[int],
    *,
    is_draw: bool,
    platform_fee_rate: Decimal = DEFAULT_PLATFORM_FEE_RATE,
) -> RewardPreview:
    """Split the pooled stakes into platform fee and payout. Pure function.

    The fee is floored to whole tokens. On a draw the stakes are refunded, so
    the whole pool is paid out and no fee is taken, although ``platform_fee``
    still reports the fee a win would have cost.
    """
    stake_list = [s or 0 for s in stakes]
    total_stakes = sum(stake_list)
    platform_fee = int(
        (total_stakes * platform_fee_rate).to_integral_value(rounding=ROUND_FLOOR)
    )
    net_payout = total_stakes if is_draw else total_stakes - platform_fee
    return RewardPreview(
        total_stakes=total_stakes,
        platform_fee=platform_fee,
        net_payout=net_payout,
        participant_count=len(stake_list),
    )


class StakePoolPreviewer:
    """Previewer over a known participant list.

    Satisfies ``OutcomePreviewerProtocol`` for hosts that already hold the
    session roster and do not need a backend round-trip.
    """

    def __init__(
        self,
        session_id: str,
        participants: Sequence[Participant],
        *,
        platform_fee_rate: Decimal = DEFAULT_PLATFORM_FEE_RATE,
    ) -> None:
        self.session_id = session_id
        self.participants = list(participants)
        self.platform_fee_rate = platform_fee_rate

    @log_timing("stake_pool_preview")
    async def preview_outcome(self, target: TargetSelection) -> RewardPreview:
        if target.session_id != self.session_id:
            raise ValueError(
                f"Target session {target.session_id} does not match {self.session_id}"
            )
        if not target.is_draw and target.winner_id not in {
            p.user_id for p in self.participants
        }:
            raise ValueError(f"Winner {target.winner_id} is not a session participant")

        preview = compute_reward_preview(
            (p.stakes_contributed for p in self.participants),
            is_draw=target.is_draw,
            platform_fee_rate=self.platform_fee_rate,
        )
        logger.debug(
            "Reward preview for session %s: stakes=%s fee=%s payout=%s",
            self.session_id,
            preview.total_stakes,
            preview.platform_fee,
            preview.net_payout,
        )
        return preview
