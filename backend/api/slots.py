"""Slot endpoints: view a day and bind activities to its slots."""

import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from backend.models.activity import TimeSlot
from backend.services import LedgerBinder
from backend.services.projection import project_annual

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/slots", tags=["slots"])


class SlotBinding(BaseModel):
    activity_id: Optional[str] = None


def get_binder(request: Request) -> LedgerBinder:
    """Helper to get the ledger binder created at startup."""
    return request.app.state.binder


def day_payload(day: date, slots: list[TimeSlot]) -> dict:
    logged = [slot for slot in slots if slot.is_logged]
    total_value = sum(slot.value for slot in logged)
    return {
        "date": day.isoformat(),
        "slots": [slot.model_dump() for slot in slots],
        "logged_count": len(logged),
        "total_value": total_value,
        "projection": project_annual(total_value),
    }


async def get_slot(binder: LedgerBinder, day: date, index: int) -> TimeSlot:
    slots = await binder.load_day(day)
    if not 0 <= index < len(slots):
        raise HTTPException(status_code=404, detail=f"Slot {index} does not exist on {day}")
    return slots[index]


@router.get("/{day}")
async def get_day(request: Request, day: date):
    """
    Get every slot of a day with the activities bound to it.

    Args:
        day: Date (YYYY-MM-DD)

    Returns:
        Slots, daily total and its annual projection
    """
    binder = get_binder(request)
    try:
        slots = await binder.load_day(day)
    except Exception as e:
        logger.error(f"Error loading slots of {day}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load slots")

    return day_payload(day, slots)


@router.put("/{day}/{index}")
async def bind_slot(request: Request, day: date, index: int, binding: SlotBinding):
    """
    Bind an activity to a slot; an empty or unknown activity id clears it.

    Args:
        day: Date (YYYY-MM-DD)
        index: Position of the slot in the day, starting at 0
        binding: Activity to bind

    Returns:
        Updated slot
    """
    binder = get_binder(request)
    slot = await get_slot(binder, day, index)

    try:
        updated = await binder.bind(slot, binding.activity_id or None)
    except ValueError as e:
        logger.error(f"Error binding {slot.id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error binding {slot.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to bind slot")

    return updated.model_dump()


@router.delete("/{day}/{index}")
async def clear_slot(request: Request, day: date, index: int):
    """Clear a slot and delete its log."""
    binder = get_binder(request)
    slot = await get_slot(binder, day, index)

    try:
        cleared = await binder.unbind(slot)
    except Exception as e:
        logger.error(f"Unexpected error clearing {slot.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to clear slot")

    return cleared.model_dump()
