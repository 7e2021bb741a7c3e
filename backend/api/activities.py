"""Activity catalog endpoints."""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Request, Query
from backend.models.activity import Activity
from backend.services import ActivityCatalog
from backend.services.projection import activity_impact_message

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/activities", tags=["activities"])


def get_catalog(request: Request) -> ActivityCatalog:
    """Helper to get the catalog loaded at startup."""
    return request.app.state.catalog


@router.get("")
async def list_activities(
    request: Request,
    category: Optional[str] = Query(None, description="Category label, e.g. 'High Value'"),
    min_value: Optional[float] = Query(None, description="Lowest hourly value"),
    max_value: Optional[float] = Query(None, description="Highest hourly value"),
):
    """
    List catalog activities, highest hourly value first.

    Args:
        category: Only activities of this category
        min_value: Only activities worth at least this much per hour
        max_value: Only activities worth at most this much per hour

    Returns:
        Activities and count
    """
    catalog = get_catalog(request)

    if min_value is not None and max_value is not None and min_value > max_value:
        raise HTTPException(status_code=400, detail="min_value must not exceed max_value")

    activities = catalog.get_by_category(category) if category else catalog.get_all()
    if min_value is not None or max_value is not None:
        low = min_value if min_value is not None else float("-inf")
        high = max_value if max_value is not None else float("inf")
        in_range = {a.id for a in catalog.get_by_value_range(low, high)}
        activities = [a for a in activities if a.id in in_range]

    return {
        "activities": [a.model_dump() for a in activities],
        "count": len(activities),
    }


@router.get("/search")
async def search_activities(
    request: Request,
    q: str = Query("", description="Search text"),
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Search activities by name and tags, best match first."""
    results = get_catalog(request).search(q, limit)
    return {
        "activities": [a.model_dump() for a in results],
        "count": len(results),
    }


@router.get("/categories")
async def get_categories(request: Request):
    return {"categories": get_catalog(request).get_categories()}


@router.get("/{activity_id}")
async def get_activity(request: Request, activity_id: str):
    """Get one activity with its per-slot value and annual impact."""
    activity: Optional[Activity] = get_catalog(request).get_by_id(activity_id)
    if activity is None:
        raise HTTPException(status_code=404, detail=f"Activity {activity_id} not found")

    return {
        **activity.model_dump(),
        "block_value": activity.block_value,
        "impact": activity_impact_message(activity.hourly_value),
    }
