"""Statistics endpoints."""

import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, HTTPException, Request, Query
from backend.models.stats import PeriodStats, Trends
from backend.services import JsonFileStorage, PeriodAggregator
from backend.services.projection import (
    INCOME_EXPLANATION,
    annual_projection_value,
    project_annual,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stats", tags=["stats"])


def get_storage(request: Request) -> JsonFileStorage:
    """Helper to get the local store created at startup."""
    return request.app.state.storage


async def load_logs(request: Request):
    try:
        return await get_storage(request).get_all_logs()
    except Exception as e:
        logger.error(f"Error reading activity logs: {e}")
        raise HTTPException(status_code=500, detail="Failed to read activity logs")


@router.get("")
async def get_stats(
    request: Request,
    period: str = Query("day", description="day, week or month"),
    day: Optional[date] = Query(None, alias="date", description="Any date within the period"),
) -> PeriodStats:
    """
    Get statistics of a period.

    Args:
        period: "day" (or "today"), "week" or "month"
        date: Any date within the period (default: today)

    Returns:
        Period statistics
    """
    logs = await load_logs(request)
    try:
        return PeriodAggregator.compute_stats(logs, period, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/trends")
async def get_trends(
    request: Request,
    day: Optional[date] = Query(None, alias="date", description="Last day of the trend"),
) -> Trends:
    """Get value per day for the last 7 days and per week for the last 4 weeks."""
    logs = await load_logs(request)
    return PeriodAggregator.calculate_trends(logs, day)


@router.get("/ranking")
async def get_ranking(
    request: Request,
    period: str = Query("week", description="day, week or month"),
    day: Optional[date] = Query(None, alias="date"),
    limit: int = Query(5, ge=1, le=50),
):
    """Get the most valuable activities of a period."""
    logs = await load_logs(request)
    try:
        stats = PeriodAggregator.compute_stats(logs, period, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    ranking = PeriodAggregator.activity_ranking(stats.activity_breakdown, limit)
    return {
        "period": stats.period,
        "ranking": [entry.model_dump() for entry in ranking],
    }


@router.get("/projection")
async def get_projection(
    request: Request,
    day: Optional[date] = Query(None, alias="date"),
):
    """Get the annual income projection of a day's total."""
    logs = await load_logs(request)
    daily_total = PeriodAggregator.total_value(logs, "day", day)
    annual = annual_projection_value(daily_total)
    return {
        "date": (day or date.today()).isoformat(),
        "daily_total": daily_total,
        "annual_value": annual,
        "projection": project_annual(daily_total),
        "explanation": INCOME_EXPLANATION,
    }
