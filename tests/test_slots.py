"""Tests for slot generation and slot transforms."""

from datetime import date, datetime, timedelta
import pytest
from backend.models.activity import Activity, TimeSlot
from backend.services import SlotGenerator, ValidationFailure

DAY = date(2024, 3, 12)
CLIENT_WORK = Activity(id="20000_0", name="Client work", category="High Value", hourly_value=20000)
SCROLLING = Activity(id="-5000_0", name="Doomscrolling", category="Negative", hourly_value=-5000)


class TestGenerateSlots:
    def test_default_day_has_48_contiguous_slots(self):
        slots = SlotGenerator().generate_slots(DAY)

        assert len(slots) == 48
        assert slots[0].start_time == datetime(2024, 3, 12, 0, 0)
        assert slots[-1].end_time == datetime(2024, 3, 13, 0, 0)
        for previous, current in zip(slots, slots[1:]):
            assert previous.end_time == current.start_time
        assert all(s.end_time - s.start_time == timedelta(minutes=30) for s in slots)

    def test_slots_start_unbound(self):
        slots = SlotGenerator().generate_slots(DAY)
        assert all(s.activity is None and s.value == 0 for s in slots)
        assert not any(s.is_logged for s in slots)

    def test_ids_are_stable_and_unique(self):
        generator = SlotGenerator()
        first = generator.generate_slots(DAY)
        second = generator.generate_slots(DAY)

        assert [s.id for s in first] == [s.id for s in second]
        assert len({s.id for s in first}) == 48
        assert first[18].id == "slot_2024-03-12_18"

    def test_datetime_argument_is_truncated_to_its_date(self):
        slots = SlotGenerator().generate_slots(datetime(2024, 3, 12, 15, 45))
        assert slots[0].start_time == datetime(2024, 3, 12, 0, 0)

    @pytest.mark.parametrize("minutes, expected", [(15, 96), (60, 24), (1440, 1)])
    def test_other_widths(self, minutes, expected):
        generator = SlotGenerator(slot_minutes=minutes)
        assert generator.slots_per_day == expected
        assert len(generator.generate_slots(DAY)) == expected

    @pytest.mark.parametrize("minutes", [0, -30, 7, 45])
    def test_invalid_width_is_rejected(self, minutes):
        with pytest.raises(ValidationFailure):
            SlotGenerator(slot_minutes=minutes)


class TestSlotTransforms:
    @pytest.fixture
    def slot(self) -> TimeSlot:
        return SlotGenerator().generate_slots(DAY)[18]

    def test_apply_activity_sets_block_value(self, slot):
        bound = SlotGenerator().apply_activity(slot, CLIENT_WORK)

        assert bound.activity == CLIENT_WORK
        assert bound.value == 10000
        assert bound.is_logged
        assert (bound.id, bound.start_time, bound.end_time) == (slot.id, slot.start_time, slot.end_time)

    def test_apply_activity_does_not_mutate_input(self, slot):
        SlotGenerator().apply_activity(slot, CLIENT_WORK)
        assert slot.activity is None
        assert slot.value == 0

    def test_negative_activity_gives_negative_value(self, slot):
        assert SlotGenerator().apply_activity(slot, SCROLLING).value == -2500

    def test_clear_undoes_bind(self, slot):
        generator = SlotGenerator()
        bound = generator.apply_activity(slot, CLIENT_WORK)
        assert generator.clear_activity(bound) == generator.clear_activity(slot)
        assert generator.clear_activity(bound) == slot

    def test_rebinding_replaces_activity(self, slot):
        generator = SlotGenerator()
        rebound = generator.apply_activity(generator.apply_activity(slot, CLIENT_WORK), SCROLLING)
        assert rebound.activity == SCROLLING
        assert rebound.value == -2500

    def test_block_value_rounds_half_up(self, slot):
        odd = Activity(id="odd", name="Odd", category="Basic", hourly_value=101)
        assert SlotGenerator().apply_activity(slot, odd).value == 51


class TestSlotLookup:
    def test_find_slot_by_time_uses_half_open_interval(self):
        slots = SlotGenerator().generate_slots(DAY)

        assert SlotGenerator.find_slot_by_time(slots, datetime(2024, 3, 12, 9, 0)).id == slots[18].id
        assert SlotGenerator.find_slot_by_time(slots, datetime(2024, 3, 12, 9, 29)).id == slots[18].id
        assert SlotGenerator.find_slot_by_time(slots, datetime(2024, 3, 12, 9, 30)).id == slots[19].id
        assert SlotGenerator.find_slot_by_time(slots, datetime(2024, 3, 13, 0, 0)) is None

    def test_next_empty_slot_skips_logged_slots(self):
        generator = SlotGenerator()
        slots = generator.generate_slots(DAY)
        slots[19] = generator.apply_activity(slots[19], CLIENT_WORK)

        found = generator.next_empty_slot(slots, datetime(2024, 3, 12, 9, 0))
        assert found.id == slots[20].id

    def test_next_empty_slot_at_end_of_day(self):
        slots = SlotGenerator().generate_slots(DAY)
        assert SlotGenerator.next_empty_slot(slots, datetime(2024, 3, 12, 23, 30)) is None
