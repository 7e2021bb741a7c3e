"""Ledger binder: binds activities to slots and persists the bindings."""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Union
from backend.models.activity import (
    Activity,
    StoredActivityLog,
    StoredDailySummary,
    TimeSlot,
    block_value_for,
)
from backend.services.errors import ValidationFailure
from backend.services.ports import ActivityLookup, LogStorage
from backend.services.slots import SlotGenerator

logger = logging.getLogger(__name__)

WriteStep = Callable[[StoredActivityLog, "LedgerBinder"], StoredActivityLog]


def require_identity(log: StoredActivityLog, binder: "LedgerBinder") -> StoredActivityLog:
    if not log.id.strip():
        raise ValidationFailure("Activity log id is required")
    if not log.activity_name.strip():
        raise ValidationFailure(f"Activity log {log.id}: activity name is required")
    return log


def require_slot_range(log: StoredActivityLog, binder: "LedgerBinder") -> StoredActivityLog:
    if log.time_slot_start >= log.time_slot_end:
        raise ValidationFailure(f"Activity log {log.id}: start must be before end")
    width = timedelta(minutes=binder.generator.slot_minutes)
    if log.time_slot_end - log.time_slot_start != width:
        raise ValidationFailure(
            f"Activity log {log.id}: slot must last {binder.generator.slot_minutes} minutes"
        )
    return log


def require_consistent_value(log: StoredActivityLog, binder: "LedgerBinder") -> StoredActivityLog:
    expected = block_value_for(log.hourly_value, binder.generator.slot_minutes)
    if log.block_value != expected:
        raise ValidationFailure(
            f"Activity log {log.id}: block value {log.block_value} does not match "
            f"hourly value {log.hourly_value} (expected {expected})"
        )
    return log


DEFAULT_PIPELINE: tuple[WriteStep, ...] = (
    require_identity,
    require_slot_range,
    require_consistent_value,
)


class LedgerBinder:
    """
    Bind activities to slots of a day.

    Every bind writes a StoredActivityLog keyed by the slot id, every unbind
    deletes it. Logs pass through the write pipeline, then get stamped with
    the device id, before they reach storage.
    """

    def __init__(
        self,
        storage: LogStorage,
        catalog: ActivityLookup,
        generator: Optional[SlotGenerator] = None,
        pipeline: tuple[WriteStep, ...] = DEFAULT_PIPELINE,
    ):
        self.storage = storage
        self.catalog = catalog
        self.generator = generator or SlotGenerator()
        self.pipeline = pipeline

    async def load_day(self, day: date) -> list[TimeSlot]:
        """
        Generate the slots of a day and overlay the persisted logs.

        Hydrated activities carry the name and values stored in the log,
        not the current catalog entry.
        """
        slots = self.generator.generate_slots(day)
        logs = await self.storage.get_logs_for_date(day)
        by_id = {log.id: log for log in logs}
        by_start = {log.time_slot_start: log for log in logs}

        hydrated = []
        for slot in slots:
            log = by_id.get(slot.id) or by_start.get(slot.start_time)
            hydrated.append(self._hydrate(slot, log) if log else slot)
        return hydrated

    def _hydrate(self, slot: TimeSlot, log: StoredActivityLog) -> TimeSlot:
        entry = self.catalog.get_by_id(log.activity_id) if log.activity_id else None
        activity = Activity(
            id=log.activity_id,
            name=log.activity_name,
            category=entry.category if entry else "",
            hourly_value=int(log.hourly_value),
            search_tags=entry.search_tags if entry else (),
        )
        return slot.model_copy(update={"activity": activity, "value": int(log.block_value)})

    async def bind(self, slot: TimeSlot, activity: Union[Activity, str, None]) -> TimeSlot:
        """
        Bind an activity to a slot and persist the binding.

        Args:
            slot: Slot to bind
            activity: Activity or catalog id; an unknown id leaves the slot unbound

        Returns:
            Updated slot

        Raises:
            ValidationFailure: If the resulting log is rejected by the write pipeline
        """
        if isinstance(activity, str):
            resolved = self.catalog.get_by_id(activity)
            if resolved is None:
                logger.warning(f"Unknown activity {activity!r} for {slot.id}, leaving slot unbound")
            activity = resolved
        if activity is None:
            return await self.unbind(slot)

        bound = self.generator.apply_activity(slot, activity)
        log = StoredActivityLog(
            id=bound.id,
            activity_id=activity.id,
            activity_name=activity.name,
            hourly_value=activity.hourly_value,
            block_value=bound.value,
            time_slot_start=bound.start_time,
            time_slot_end=bound.end_time,
            logged_at=datetime.now(),
        )
        for step in self.pipeline:
            log = step(log, self)
        log = log.model_copy(update={"device_id": await self.storage.get_device_id()})

        await self.storage.save_log(log)
        logger.info(f"Bound {activity.name} to {slot.id} ({bound.value})")
        await self.refresh_daily_summary(slot.start_time.date())
        return bound

    async def unbind(self, slot: TimeSlot) -> TimeSlot:
        """Clear a slot and delete its persisted log."""
        cleared = self.generator.clear_activity(slot)
        await self.storage.delete_log(slot.id)
        logger.info(f"Cleared {slot.id}")
        await self.refresh_daily_summary(slot.start_time.date())
        return cleared

    async def refresh_daily_summary(self, day: date) -> StoredDailySummary:
        """Recompute and store the summary of ``day`` from its logs."""
        logs = await self.storage.get_logs_for_date(day)
        device_id = await self.storage.get_device_id()
        summary = StoredDailySummary(
            id=f"summary_{day.isoformat()}_{device_id}",
            date=day.isoformat(),
            total_value=sum(log.block_value for log in logs),
            activity_count=len(logs),
            computed_at=datetime.now(),
            device_id=device_id,
        )
        await self.storage.save_summary(summary)
        return summary
