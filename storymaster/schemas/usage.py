"""Usage monitor report schemas — derived on demand, never stored."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

HealthStatus = Literal["healthy", "warning", "critical"]


class AgentUsage(BaseModel):
    agent_id: str
    usage_count: int


class ResponseTimes(BaseModel):
    average: float = 0.0
    p95: float = 0.0
    p99: float = 0.0


class UsageMetrics(BaseModel):
    total_users: int = 0
    active_users: int = 0
    total_tokens_used: int = 0
    total_cost: float = 0.0
    popular_agents: list[AgentUsage] = []
    error_rate: float = 0.0  # percent, process lifetime
    response_time: ResponseTimes = ResponseTimes()


class SystemHealth(BaseModel):
    status: HealthStatus
    uptime_seconds: float
    error_rate: float
    alerts: list[str] = []


class UserUsageReport(BaseModel):
    user_id: str
    tokens_used: int
    cost: float
    sessions_count: int
    last_activity: datetime
    plan: str
    token_limit: int


class AgentPerformance(BaseModel):
    agent_id: str
    total_sessions: int
    average_tokens: float
    average_cost: float
    average_latency: float
    success_rate: float  # percent
