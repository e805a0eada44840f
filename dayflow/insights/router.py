"""
DAYFLOW Planner API - Insights Router

Task statistics for the authenticated user.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from dayflow.auth.dependencies import CurrentUser
from dayflow.tasks.enums import StatsTimeframe
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.tasks.router import get_task_repository
from dayflow.insights.service import InsightsService
from dayflow.insights.schemas import TaskStats


router = APIRouter(prefix="/insights", tags=["Insights"])


async def get_insights_service(
    task_repository: Annotated[TaskRepositoryInterface, Depends(get_task_repository)],
) -> InsightsService:
    """Dependency to get insights service instance."""
    return InsightsService(task_repository)


@router.get("/stats", response_model=TaskStats)
async def get_task_stats(
    current_user: CurrentUser,
    insights_service: Annotated[InsightsService, Depends(get_insights_service)],
    timeframe: StatsTimeframe = Query(default=StatsTimeframe.WEEK),
) -> TaskStats:
    # "now" is taken here and injected so the service stays deterministic
    now = datetime.now(timezone.utc)
    return await insights_service.get_task_stats(current_user.id, timeframe, now)
