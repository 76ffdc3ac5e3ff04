"""Usage endpoints — rolling metrics, health and per-agent / per-user reports."""

from fastapi import APIRouter, Depends

from storymaster.dependencies import get_monitor
from storymaster.exceptions import NotFoundError
from storymaster.schemas.usage import AgentPerformance, SystemHealth, UsageMetrics, UserUsageReport
from storymaster.services.usage_monitor import UsageMonitor

router = APIRouter()


@router.get("/metrics", response_model=UsageMetrics)
async def get_metrics(monitor: UsageMonitor = Depends(get_monitor)):
    return monitor.get_global_metrics()


@router.get("/health", response_model=SystemHealth)
async def get_health(monitor: UsageMonitor = Depends(get_monitor)):
    return monitor.get_system_health()


@router.get("/agents/{agent_id}", response_model=AgentPerformance)
async def get_agent_performance(agent_id: str, monitor: UsageMonitor = Depends(get_monitor)):
    report = monitor.get_agent_performance(agent_id)
    if not report:
        raise NotFoundError(f"No sessions recorded for agent {agent_id}")
    return report


@router.get("/users/{user_id}", response_model=UserUsageReport)
async def get_user_report(user_id: str, monitor: UsageMonitor = Depends(get_monitor)):
    report = monitor.get_user_usage_report(user_id)
    if not report:
        raise NotFoundError(f"User {user_id} not found")
    return report
