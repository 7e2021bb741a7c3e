"""Annual income projection and Indian-style number formatting."""

from decimal import Decimal, ROUND_HALF_UP
from backend.models.activity import round_half_up

CURRENCY_SYMBOL = "₹"
DAY_HOURS = 24
WORKING_HOURS_PER_DAY = 8
WORKING_DAYS_PER_YEAR = 250

# (threshold, divisor, suffix), largest first
_TIERS = (
    (10_000_000, 10_000_000, "Cr"),
    (100_000, 100_000, "L"),
    (1_000, 1_000, "K"),
)

INCOME_EXPLANATION = """Income calculations are based on realistic work patterns:

- 8 hours productive work per day
- 40 hours per week (5 working days)
- 250 working days per year (50 weeks)

Your logged activities are scaled to represent a typical 8-hour workday, not 24-hour projections. This provides realistic income estimations based on sustainable work patterns.

The app tracks your time value to help you optimize how you spend your productive hours."""


def _fixed(value: float, decimals: int) -> str:
    """Fixed-point string rounded half up, so 6.25 gives "6.3"."""
    exponent = Decimal(1).scaleb(-decimals)
    return str(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def _compact(abs_amount: float) -> str:
    for threshold, divisor, suffix in _TIERS:
        if abs_amount >= threshold:
            scaled = abs_amount / divisor
            decimals = 0 if scaled >= 10 else 1
            return f"{CURRENCY_SYMBOL}{_fixed(scaled, decimals)}{suffix}"
    return f"{CURRENCY_SYMBOL}{round_half_up(abs_amount)}"


def format_indian_number(amount: float) -> str:
    """
    Format an amount with an explicit sign, e.g. "+₹1.5K" or "-₹20L".

    Args:
        amount: Signed amount

    Returns:
        Compact string using thousand / lakh / crore units
    """
    prefix = "-" if amount < 0 else "+"
    return f"{prefix}{_compact(abs(amount))}"


def format_indian_number_simple(amount: float) -> str:
    """Format the magnitude of an amount without a sign, e.g. "₹2.5Cr"."""
    return _compact(abs(amount))


def annual_projection_value(daily_total: float) -> float:
    """Scale a 24-hour daily total to an 8-hour workday and a 250-day year."""
    return daily_total / DAY_HOURS * WORKING_HOURS_PER_DAY * WORKING_DAYS_PER_YEAR


def project_annual(daily_total: float) -> str:
    """
    Annualized estimate of a daily total.

    Args:
        daily_total: Sum of slot values for one day

    Returns:
        Formatted projection, e.g. "₹20L" for a daily total of 24000
    """
    annual = annual_projection_value(daily_total)
    formatted = format_indian_number_simple(annual)
    return f"-{formatted}" if annual < 0 else formatted


def activity_impact_message(hourly_value: float) -> str:
    """Describe what one hour a working day of an activity is worth over a year."""
    annual_impact = hourly_value * WORKING_DAYS_PER_YEAR
    if annual_impact >= 500_000:
        return f"This could add {format_indian_number_simple(annual_impact)} to your annual income!"
    if annual_impact < 0:
        return f"This could cost you {format_indian_number_simple(annual_impact)} annually"
    return f"Annual impact: {format_indian_number(annual_impact)}"
