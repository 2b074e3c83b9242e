"""Usage reporting after a generation turn.

The billing backend is owned by the host application. The chat orchestrator
only depends on the :class:`UsageLogger` protocol.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from motionkit.services.ai_models import calculate_cost

logger = logging.getLogger(__name__)


@dataclass
class UsageRecord:
    user_id: str
    model_id: str
    prompt_tokens: int
    completion_tokens: int
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def estimated_cost(self) -> float:
        return calculate_cost(self.model_id, self.prompt_tokens, self.completion_tokens)


class UsageLogger(Protocol):
    async def log_usage(self, record: UsageRecord) -> None: ...


class InMemoryUsageLogger:
    """Keeps usage records in process; also answers monthly cost queries."""

    def __init__(self) -> None:
        self.records: list[UsageRecord] = []

    async def log_usage(self, record: UsageRecord) -> None:
        self.records.append(record)
        logger.info(
            f"AI usage: user={record.user_id} model={record.model_id} "
            f"tokens={record.total_tokens} cost=${record.estimated_cost:.6f}"
        )

    def monthly_cost(self, user_id: str, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return sum(
            record.estimated_cost
            for record in self.records
            if record.user_id == user_id and record.created_at >= start_of_month
        )
