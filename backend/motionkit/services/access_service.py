"""Per-user AI access policy.

Users need an enabled unlock to start a chat session, and an optional
monthly spending cap is enforced against logged usage.
"""

from dataclasses import dataclass
from typing import Protocol

from motionkit.services.usage_service import InMemoryUsageLogger


@dataclass
class AIUnlock:
    user_id: str
    enabled: bool = True
    max_cost_per_month: float | None = None
    notes: str | None = None


@dataclass
class AccessDecision:
    allowed: bool
    reason: str | None = None
    current_cost: float | None = None
    max_cost: float | None = None


def evaluate_access(unlock: AIUnlock | None, current_monthly_cost: float = 0.0) -> AccessDecision:
    if unlock is None:
        return AccessDecision(allowed=False, reason="AI access not enabled for this user")
    if not unlock.enabled:
        return AccessDecision(allowed=False, reason="AI access is disabled")

    if unlock.max_cost_per_month is not None:
        if current_monthly_cost >= unlock.max_cost_per_month:
            return AccessDecision(
                allowed=False,
                reason="Monthly cost limit exceeded",
                current_cost=current_monthly_cost,
                max_cost=unlock.max_cost_per_month,
            )
        return AccessDecision(
            allowed=True,
            current_cost=current_monthly_cost,
            max_cost=unlock.max_cost_per_month,
        )

    return AccessDecision(allowed=True)


class AccessChecker(Protocol):
    async def check(self, user_id: str) -> AccessDecision: ...


class InMemoryAccessChecker:
    """Access checks against in-process unlocks and usage records."""

    def __init__(
        self,
        unlocks: dict[str, AIUnlock] | None = None,
        usage: InMemoryUsageLogger | None = None,
    ):
        self.unlocks = unlocks or {}
        self.usage = usage

    def enable(self, user_id: str, max_cost_per_month: float | None = None) -> AIUnlock:
        unlock = AIUnlock(user_id=user_id, max_cost_per_month=max_cost_per_month)
        self.unlocks[user_id] = unlock
        return unlock

    def disable(self, user_id: str) -> None:
        unlock = self.unlocks.get(user_id)
        if unlock is not None:
            unlock.enabled = False

    async def check(self, user_id: str) -> AccessDecision:
        cost = self.usage.monthly_cost(user_id) if self.usage is not None else 0.0
        return evaluate_access(self.unlocks.get(user_id), cost)
