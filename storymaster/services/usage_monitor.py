"""Usage monitor — bounded session history and rolling metrics."""

from __future__ import annotations

import logging
import math
import time
from collections import Counter, deque
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from storymaster.schemas.session import AgentSession
from storymaster.schemas.usage import (
    AgentPerformance,
    AgentUsage,
    ResponseTimes,
    SystemHealth,
    UsageMetrics,
    UserUsageReport,
)

if TYPE_CHECKING:
    from storymaster.services.auth_service import AuthService

logger = logging.getLogger(__name__)

WARNING_ERROR_RATE = 5.0
CRITICAL_ERROR_RATE = 10.0
WARNING_LATENCY_MS = 5000.0
CRITICAL_LATENCY_MS = 10000.0


def percentile(sorted_values: list[float], fraction: float) -> float:
    """Value at index floor(n * fraction), clamped to the last element; 0 if empty."""
    if not sorted_values:
        return 0.0
    index = min(math.floor(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[index]


class UsageMonitor:
    """Keeps the most recent ``capacity`` sessions (oldest evicted first).

    Aggregates cover sessions created within ``window`` of now; the error
    rate covers every request since the monitor was created.
    """

    def __init__(
        self,
        auth: AuthService | None = None,
        capacity: int = 1000,
        window: timedelta = timedelta(hours=24),
    ):
        self.auth = auth
        self.window = window
        self._sessions: deque[AgentSession] = deque(maxlen=capacity)
        self._agent_errors: Counter[str] = Counter()
        self.error_count = 0
        self.total_requests = 0
        self._started = time.monotonic()

    @property
    def history(self) -> list[AgentSession]:
        return list(self._sessions)

    def record_session(self, session: AgentSession) -> None:
        self._sessions.append(session)
        self.total_requests += 1

    def record_error(self, agent_id: str | None = None) -> None:
        self.error_count += 1
        self.total_requests += 1
        if agent_id:
            self._agent_errors[agent_id] += 1

    @property
    def error_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.error_count / self.total_requests * 100

    def get_global_metrics(self, now: datetime | None = None) -> UsageMetrics:
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.window
        recent = [s for s in self._sessions if s.created_at >= cutoff]

        # Counter keeps first-seen order, and sorted() is stable, so ties
        # stay in the order the agents first appeared.
        agent_counts = Counter(s.agent_id for s in recent)
        popular = sorted(agent_counts.items(), key=lambda item: item[1], reverse=True)[:5]

        latencies = sorted(s.usage.latency_ms for s in recent)
        average = sum(latencies) / len(latencies) if latencies else 0.0

        return UsageMetrics(
            total_users=self.auth.user_count() if self.auth else 0,
            active_users=len({s.user_id for s in recent}),
            total_tokens_used=sum(s.usage.tokens_used for s in recent),
            total_cost=sum(s.usage.cost for s in recent),
            popular_agents=[AgentUsage(agent_id=a, usage_count=c) for a, c in popular],
            error_rate=self.error_rate,
            response_time=ResponseTimes(
                average=average,
                p95=percentile(latencies, 0.95),
                p99=percentile(latencies, 0.99),
            ),
        )

    def get_system_health(self, now: datetime | None = None) -> SystemHealth:
        metrics = self.get_global_metrics(now)
        error_rate = metrics.error_rate
        average = metrics.response_time.average

        alerts: list[str] = []
        if error_rate > WARNING_ERROR_RATE:
            alerts.append(f"High error rate: {error_rate:.2f}%")
        if average > WARNING_LATENCY_MS:
            alerts.append(f"Slow response time: {average:.0f}ms average")

        status = "warning" if alerts else "healthy"
        if error_rate > CRITICAL_ERROR_RATE or average > CRITICAL_LATENCY_MS:
            status = "critical"

        return SystemHealth(
            status=status,
            uptime_seconds=time.monotonic() - self._started,
            error_rate=error_rate,
            alerts=alerts,
        )

    def get_user_usage_report(self, user_id: str) -> UserUsageReport | None:
        user = self.auth.get_user(user_id) if self.auth else None
        if user is None:
            return None

        sessions = [s for s in self._sessions if s.user_id == user_id]
        return UserUsageReport(
            user_id=user_id,
            tokens_used=sum(s.usage.tokens_used for s in sessions),
            cost=sum(s.usage.cost for s in sessions),
            sessions_count=len(sessions),
            last_activity=max((s.created_at for s in sessions), default=user.created_at),
            plan=user.plan,
            token_limit=user.token_limit,
        )

    def get_agent_performance(self, agent_id: str) -> AgentPerformance | None:
        sessions = [s for s in self._sessions if s.agent_id == agent_id]
        if not sessions:
            return None

        n = len(sessions)
        errors = self._agent_errors[agent_id]
        return AgentPerformance(
            agent_id=agent_id,
            total_sessions=n,
            average_tokens=sum(s.usage.tokens_used for s in sessions) / n,
            average_cost=sum(s.usage.cost for s in sessions) / n,
            average_latency=sum(s.usage.latency_ms for s in sessions) / n,
            success_rate=n / (n + errors) * 100,
        )

    def cleanup_old_metrics(self, older_than_days: int = 30, now: datetime | None = None) -> int:
        """Drop sessions older than the cutoff; returns how many were removed."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=older_than_days)
        kept = [s for s in self._sessions if s.created_at >= cutoff]
        removed = len(self._sessions) - len(kept)
        self._sessions = deque(kept, maxlen=self._sessions.maxlen)
        if removed:
            logger.info("Removed %d session records older than %d days", removed, older_than_days)
        return removed
