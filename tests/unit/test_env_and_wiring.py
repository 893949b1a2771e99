"""Tests for env-driven settings and the wiring helpers built on them."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError

from rallypay.application.completion.flow import FlowStep
from rallypay.dependencies import (
    get_backend_client,
    get_confirmation_flow,
    get_selection_controller,
    get_stake_pool_previewer,
)
from rallypay.domain.completion.entities import Participant, TargetSelection
from rallypay.env import Settings, get_settings
from rallypay.infrastructure.notifications import LoggingNotifier
from tests.fixtures import StubCommitter, StubPreviewer

ENV_VARS = (
    "RALLYPAY_BACKEND_URL",
    "RALLYPAY_API_KEY",
    "RALLYPAY_HTTP_TIMEOUT",
    "RALLYPAY_FLOW_TIMEOUT",
    "RALLYPAY_TOKEN_RATE",
    "RALLYPAY_PLATFORM_FEE_RATE",
    "RALLYPAY_MIN_CASH_CHARGE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = get_settings()

        assert settings.backend_base_url == "http://localhost:54321"
        assert settings.backend_api_key is None
        assert settings.flow_timeout is None
        assert settings.token_rate == Decimal("0.01")
        assert settings.platform_fee_rate == Decimal("0.10")
        assert settings.minimum_cash_charge == Decimal("0.50")

    def test_reads_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("RALLYPAY_BACKEND_URL", "https://api.club.example/")
        clean_env.setenv("RALLYPAY_API_KEY", "secret")
        clean_env.setenv("RALLYPAY_FLOW_TIMEOUT", "15")
        clean_env.setenv("RALLYPAY_TOKEN_RATE", "0.02")

        settings = get_settings()

        assert settings.backend_base_url == "https://api.club.example"
        assert settings.backend_api_key == "secret"
        assert settings.flow_timeout == 15.0
        assert settings.token_rate == Decimal("0.02")

    def test_blank_flow_timeout_means_none(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        clean_env.setenv("RALLYPAY_FLOW_TIMEOUT", "  ")

        assert get_settings().flow_timeout is None

    @pytest.mark.parametrize(
        "url", ["", "ftp://backend", "backend.local", "http://"]
    )
    def test_rejects_bad_backend_url(self, url: str) -> None:
        with pytest.raises(ValidationError):
            Settings(backend_base_url=url)

    def test_rejects_non_positive_token_rate(self) -> None:
        with pytest.raises(ValidationError):
            Settings(token_rate=Decimal("0"))


class TestWiring:
    def test_selection_controller_uses_configured_rate(self) -> None:
        settings = Settings(token_rate=Decimal("0.02"))

        controller = get_selection_controller(100, 40, settings=settings)

        assert controller.request.token_rate == Decimal("0.02")
        assert controller.tokens_to_use == 40
        assert controller.breakdown.cash == Decimal("1.20")

    def test_confirmation_flow_defaults_to_logging_notifier(self) -> None:
        flow = get_confirmation_flow(
            StubPreviewer(), StubCommitter(), settings=Settings(flow_timeout=5)
        )

        assert flow.step is FlowStep.SELECT
        assert flow.balance is None

    @pytest.mark.asyncio
    async def test_stake_pool_previewer_uses_configured_fee(self) -> None:
        previewer = get_stake_pool_previewer(
            "s-1",
            [
                Participant(user_id="alice", stakes_contributed=50),
                Participant(user_id="bob", stakes_contributed=50),
            ],
            settings=Settings(platform_fee_rate=Decimal("0.20")),
        )

        preview = await previewer.preview_outcome(
            TargetSelection(session_id="s-1", winner_id="alice")
        )

        assert (preview.platform_fee, preview.net_payout) == (20, 80)

    @pytest.mark.asyncio
    async def test_backend_client_from_settings(self) -> None:
        client = get_backend_client(Settings(backend_api_key="k"))

        await client.aclose()


class TestLoggingNotifier:
    def test_levels_follow_kind(self, caplog: pytest.LogCaptureFixture) -> None:
        notifier = LoggingNotifier()

        with caplog.at_level(logging.INFO, logger="rallypay.notifications"):
            notifier.notify("success", "Paid")
            notifier.notify("error", "Declined")

        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.INFO, "[success] Paid"),
            (logging.ERROR, "[error] Declined"),
        ]
