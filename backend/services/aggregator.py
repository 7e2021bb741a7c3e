"""Period statistics over activity logs."""

import math
from datetime import date, datetime, time, timedelta
from typing import Optional, Union
import pandas as pd
from backend.models.activity import StoredActivityLog, round_half_up
from backend.models.stats import (
    ActivityTotals,
    PeriodStats,
    RankedActivity,
    TierTotals,
    TopActivity,
    TrendPoint,
    Trends,
)
from backend.services.errors import ValidationFailure

SLOT_HOURS = 0.5
HIGH_VALUE_THRESHOLD = 10000
PERIODS = ("day", "week", "month")

# Ordered highest first: (key, label, inclusive lower bound on hourly value)
VALUE_TIERS = (
    ("ceo", "CEO Level", 2_000_000),
    ("executive", "Executive", 200_000),
    ("high_value", "High Value", 20_000),
    ("professional", "Professional", 2_000),
    ("basic", "Basic", 200),
    ("low_value", "Low Value", None),
    ("free", "Free", None),
    ("negative", "Negative", None),
)


def tier_for(hourly_value: float) -> str:
    """Name of the value tier an hourly value falls into."""
    for key, _, lower in VALUE_TIERS:
        if lower is not None and hourly_value >= lower:
            return key
    if hourly_value > 0:
        return "low_value"
    if hourly_value == 0:
        return "free"
    return "negative"


def _as_date(value: Union[date, datetime, None]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def round_half_ceiling(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity (-12.5 gives -12)."""
    return math.floor(value + 0.5)


def _growth(current: float, previous: float) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_ceiling((current - previous) / previous * 100)


class PeriodAggregator:
    """Compute totals, tiers, trends and growth from a flat log collection."""

    @staticmethod
    def normalize_period(period: str) -> str:
        """
        Validate a period name.

        Raises:
            ValidationFailure: If the period is not day, week or month
        """
        period = period.lower()
        if period == "today":
            return "day"
        if period not in PERIODS:
            raise ValidationFailure(f"Unknown period {period!r}, expected one of {PERIODS}")
        return period

    @classmethod
    def period_bounds(
        cls, period: str, reference: Union[date, datetime, None] = None
    ) -> tuple[datetime, datetime]:
        """
        Resolve the date range of a period.

        Args:
            period: "day" (or "today"), "week" (Monday start) or "month"
            reference: Any date within the period (default: today)

        Returns:
            Tuple of (start at 00:00:00, end at 23:59:59 of the last day)
        """
        period = cls.normalize_period(period)
        day = _as_date(reference)

        if period == "week":
            first = day - timedelta(days=day.weekday())
            last = first + timedelta(days=6)
        elif period == "month":
            first = day.replace(day=1)
            next_month = (first + timedelta(days=32)).replace(day=1)
            last = next_month - timedelta(days=1)
        else:
            first = last = day

        return datetime.combine(first, time.min), datetime.combine(last, time(23, 59, 59))

    @classmethod
    def previous_reference(cls, period: str, reference: Union[date, datetime, None] = None) -> date:
        """A date inside the period immediately preceding the one of ``reference``."""
        period = cls.normalize_period(period)
        start, _ = cls.period_bounds(period, reference)
        return start.date() - timedelta(days=1)

    @staticmethod
    def logs_to_dataframe(logs: list[StoredActivityLog]) -> pd.DataFrame:
        """
        Convert logs to a DataFrame.

        Args:
            logs: List of logs

        Returns:
            DataFrame with one row per log, empty if there are no logs
        """
        if not logs:
            return pd.DataFrame()

        df = pd.DataFrame([log.model_dump() for log in logs])
        df["time_slot_start"] = pd.to_datetime(df["time_slot_start"])
        df["time_slot_end"] = pd.to_datetime(df["time_slot_end"])
        df["block_value"] = df["block_value"].astype(float)
        df["hourly_value"] = df["hourly_value"].astype(float)
        df["tier"] = df["hourly_value"].apply(tier_for)
        return df

    @classmethod
    def filter_logs(
        cls, logs: list[StoredActivityLog], start: datetime, end: datetime
    ) -> list[StoredActivityLog]:
        """
        Keep logs whose slot starts within ``[start, end]``.

        Raises:
            ValidationFailure: If start is after end
        """
        if start > end:
            raise ValidationFailure(f"Invalid date range: {start} is after {end}")
        return [log for log in logs if start <= log.time_slot_start <= end]

    @classmethod
    def total_value(cls, logs: list[StoredActivityLog], period: str, reference) -> float:
        start, end = cls.period_bounds(period, reference)
        return float(sum(log.block_value for log in cls.filter_logs(logs, start, end)))

    @classmethod
    def calculate_growth(
        cls, logs: list[StoredActivityLog], period: str, reference: Union[date, datetime, None] = None
    ) -> int:
        """Percent change of total value against the preceding period of the same kind."""
        current = cls.total_value(logs, period, reference)
        previous = cls.total_value(logs, period, cls.previous_reference(period, reference))
        return _growth(current, previous)

    @staticmethod
    def empty_tiers() -> list[TierTotals]:
        return [TierTotals(tier=key, label=label) for key, label, _ in VALUE_TIERS]

    @classmethod
    def compute_stats(
        cls,
        logs: list[StoredActivityLog],
        period: str,
        reference: Union[date, datetime, None] = None,
    ) -> PeriodStats:
        """
        Calculate statistics of a period.

        Args:
            logs: All known logs; they are filtered to the period here
            period: "day", "week" or "month"
            reference: Any date within the period (default: today)

        Returns:
            PeriodStats instance, with zero defaults when nothing was logged
        """
        period = cls.normalize_period(period)
        start, end = cls.period_bounds(period, reference)
        stats = PeriodStats(
            period=period,
            start_date=start,
            end_date=end,
            value_breakdown=cls.empty_tiers(),
            growth=cls.calculate_growth(logs, period, reference),
            weekly_growth=cls.calculate_growth(logs, "week", reference),
            monthly_growth=cls.calculate_growth(logs, "month", reference),
        )

        period_logs = cls.filter_logs(logs, start, end)
        if not period_logs:
            return stats

        df = cls.logs_to_dataframe(period_logs)
        count = len(df)
        total_hours = count * SLOT_HOURS
        total_value = float(df["block_value"].sum())
        productive_hours = int((df["block_value"] > 0).sum()) * SLOT_HOURS

        by_activity = df.groupby("activity_name", sort=False).agg(
            value=("block_value", "sum"), count=("id", "size")
        )
        breakdown = {
            str(name): ActivityTotals(
                hours=int(row["count"]) * SLOT_HOURS,
                value=float(row["value"]),
                count=int(row["count"]),
            )
            for name, row in by_activity.iterrows()
        }
        top_name = str(by_activity["value"].idxmax())

        by_tier = df.groupby("tier").agg(value=("block_value", "sum"), count=("id", "size"))
        tiers = []
        for tier in cls.empty_tiers():
            if tier.tier in by_tier.index:
                tier_count = int(by_tier.loc[tier.tier, "count"])
                tier = tier.model_copy(
                    update={
                        "hours": tier_count * SLOT_HOURS,
                        "value": float(by_tier.loc[tier.tier, "value"]),
                        "activity_count": tier_count,
                    }
                )
            tiers.append(tier)

        return stats.model_copy(
            update={
                "total_hours": total_hours,
                "total_value": total_value,
                "avg_hourly_value": total_value / total_hours if total_hours > 0 else 0.0,
                "efficiency": round_half_up(productive_hours / total_hours * 100) if total_hours > 0 else 0,
                "high_value_hours": int((df["block_value"] >= HIGH_VALUE_THRESHOLD).sum()) * SLOT_HOURS,
                "zero_value_hours": int((df["block_value"] == 0).sum()) * SLOT_HOURS,
                "top_activity": TopActivity(
                    name=top_name,
                    hours=breakdown[top_name].hours,
                    value=breakdown[top_name].value,
                ),
                "activity_breakdown": breakdown,
                "value_breakdown": tiers,
            }
        )

    @classmethod
    def calculate_trends(
        cls, logs: list[StoredActivityLog], reference: Union[date, datetime, None] = None
    ) -> Trends:
        """
        Value per day for the last 7 days and per week for the last 4 weeks.

        Args:
            logs: All known logs
            reference: Last day of the trend window (default: today)

        Returns:
            Trends instance, oldest point first
        """
        day = _as_date(reference)

        daily = []
        for offset in range(6, -1, -1):
            current = day - timedelta(days=offset)
            daily.append(
                TrendPoint(
                    label=current.strftime("%a"),
                    start=current,
                    end=current,
                    value=cls.total_value(logs, "day", current),
                )
            )

        weekly = []
        for offset in range(3, -1, -1):
            current = day - timedelta(weeks=offset)
            start, end = cls.period_bounds("week", current)
            weekly.append(
                TrendPoint(
                    label=f"W{offset + 1}",
                    start=start.date(),
                    end=end.date(),
                    value=cls.total_value(logs, "week", current),
                )
            )

        return Trends(daily=daily, weekly=weekly)

    @staticmethod
    def activity_ranking(
        breakdown: dict[str, ActivityTotals], limit: Optional[int] = 5
    ) -> list[RankedActivity]:
        """Activities ordered by total value, highest first."""
        ordered = sorted(breakdown.items(), key=lambda item: item[1].value, reverse=True)
        if limit:
            ordered = ordered[:limit]
        return [
            RankedActivity(
                rank=index + 1,
                name=name,
                hours=totals.hours,
                value=totals.value,
                sessions=totals.count,
                avg_session_value=round_half_ceiling(totals.value / totals.count) if totals.count else 0,
            )
            for index, (name, totals) in enumerate(ordered)
        ]
