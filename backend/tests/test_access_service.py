"""Tests for AI access checks, usage logging and cost estimation."""

from datetime import datetime, timedelta, timezone

import pytest

from motionkit.services.access_service import AIUnlock, InMemoryAccessChecker, evaluate_access
from motionkit.services.ai_models import calculate_cost, get_model
from motionkit.services.usage_service import InMemoryUsageLogger, UsageRecord


class TestCosts:
    def test_known_model_pricing(self):
        assert calculate_cost("moonshotai/kimi-k2", 1_000_000, 1_000_000) == pytest.approx(0.9)

    def test_unknown_model_uses_default_pricing(self):
        assert calculate_cost("acme/unknown", 1_000_000, 1_000_000) == pytest.approx(4.0)

    def test_get_model_falls_back_to_default(self):
        assert get_model("acme/unknown").id == "moonshotai/kimi-k2"
        assert get_model("openai/gpt-4o").name == "GPT-4o"


class TestEvaluateAccess:
    def test_no_unlock(self):
        decision = evaluate_access(None)
        assert not decision.allowed
        assert "not enabled" in decision.reason

    def test_disabled(self):
        decision = evaluate_access(AIUnlock(user_id="u", enabled=False))
        assert not decision.allowed

    def test_under_and_over_cap(self):
        unlock = AIUnlock(user_id="u", max_cost_per_month=5.0)
        assert evaluate_access(unlock, 4.99).allowed
        decision = evaluate_access(unlock, 5.0)
        assert not decision.allowed
        assert decision.reason == "Monthly cost limit exceeded"
        assert decision.max_cost == 5.0

    def test_no_cap(self):
        assert evaluate_access(AIUnlock(user_id="u"), 1000.0).allowed


class TestInMemoryAccessChecker:
    @pytest.mark.asyncio
    async def test_cap_enforced_from_logged_usage(self):
        usage = InMemoryUsageLogger()
        checker = InMemoryAccessChecker(usage=usage)
        checker.enable("u", max_cost_per_month=1.0)
        assert (await checker.check("u")).allowed

        await usage.log_usage(UsageRecord("u", "moonshotai/kimi-k2", 2_000_000, 1_000_000))
        decision = await checker.check("u")
        assert not decision.allowed
        assert decision.current_cost == pytest.approx(1.2)

    @pytest.mark.asyncio
    async def test_disable(self):
        checker = InMemoryAccessChecker()
        checker.enable("u")
        checker.disable("u")
        assert not (await checker.check("u")).allowed

    def test_monthly_cost_ignores_previous_months(self):
        usage = InMemoryUsageLogger()
        now = datetime(2026, 3, 15, tzinfo=timezone.utc)
        usage.records = [
            UsageRecord("u", "moonshotai/kimi-k2", 1_000_000, 0, created_at=now - timedelta(days=30)),
            UsageRecord("u", "moonshotai/kimi-k2", 1_000_000, 0, created_at=now),
            UsageRecord("other", "moonshotai/kimi-k2", 1_000_000, 0, created_at=now),
        ]
        assert usage.monthly_cost("u", now=now) == pytest.approx(0.3)
