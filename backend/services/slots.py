"""Slot generation and pure slot transforms."""

from datetime import date, datetime, time, timedelta
from typing import Optional
from backend.models.activity import SLOT_MINUTES, Activity, TimeSlot, block_value_for
from backend.services.errors import ValidationFailure

MINUTES_PER_DAY = 24 * 60


def slot_id(day: date, index: int) -> str:
    """Identity of the ``index``-th slot of ``day``, stable across regenerations."""
    return f"slot_{day.isoformat()}_{index:02d}"


class SlotGenerator:
    """Partition calendar days into fixed-width accounting slots."""

    def __init__(self, slot_minutes: int = SLOT_MINUTES):
        """
        Initialize the generator.

        Args:
            slot_minutes: Width of a slot in minutes (default: 30)

        Raises:
            ValidationFailure: If the width is not positive or does not divide a day
        """
        if slot_minutes <= 0:
            raise ValidationFailure(f"Slot width must be positive, got {slot_minutes}")
        if MINUTES_PER_DAY % slot_minutes:
            raise ValidationFailure(
                f"Slot width must divide {MINUTES_PER_DAY} minutes, got {slot_minutes}"
            )
        self.slot_minutes = slot_minutes

    @property
    def slots_per_day(self) -> int:
        return MINUTES_PER_DAY // self.slot_minutes

    def generate_slots(self, day: date) -> list[TimeSlot]:
        """
        Generate the ordered, contiguous slots of a day.

        Args:
            day: Calendar date (a datetime is truncated to its date)

        Returns:
            List of unbound TimeSlot, first starting at 00:00 and last ending
            at 00:00 of the next day
        """
        if isinstance(day, datetime):
            day = day.date()

        midnight = datetime.combine(day, time.min)
        width = timedelta(minutes=self.slot_minutes)
        return [
            TimeSlot(
                id=slot_id(day, index),
                start_time=midnight + index * width,
                end_time=midnight + (index + 1) * width,
            )
            for index in range(self.slots_per_day)
        ]

    def apply_activity(self, slot: TimeSlot, activity: Activity) -> TimeSlot:
        """Return a copy of ``slot`` bound to ``activity``."""
        return slot.model_copy(
            update={
                "activity": activity,
                "value": block_value_for(activity.hourly_value, self.slot_minutes),
            }
        )

    @staticmethod
    def clear_activity(slot: TimeSlot) -> TimeSlot:
        """Return a copy of ``slot`` with no activity and zero value."""
        return slot.model_copy(update={"activity": None, "value": 0})

    @staticmethod
    def find_slot_by_time(slots: list[TimeSlot], when: datetime) -> Optional[TimeSlot]:
        """Find the slot whose half-open interval contains ``when``."""
        for slot in slots:
            if slot.start_time <= when < slot.end_time:
                return slot
        return None

    @staticmethod
    def next_empty_slot(slots: list[TimeSlot], after: datetime) -> Optional[TimeSlot]:
        """First unbound slot starting after ``after``."""
        candidates = sorted(
            (s for s in slots if s.start_time > after and not s.is_logged),
            key=lambda s: s.start_time,
        )
        return candidates[0] if candidates else None
