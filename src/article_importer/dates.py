"""Lenient calendar date construction from XML year/month/day parts."""

from datetime import date


def _to_int(value: str | int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    value = value.strip()
    if not value or not value.lstrip("-").isdigit():
        return None
    return int(value)


def date_from_parts(
    year: str | int | None,
    month: str | int | None = None,
    day: str | int | None = None,
    today: date | None = None,
) -> date | None:
    """Build a date from loosely formatted parts.

    Years later than the current one are clamped to the current year, and
    two-digit years are expanded into the current century (or the previous
    one when the expansion lands in the future). Missing or zero months and
    days default to 1.

    Args:
        year: Year text (e.g., "2019", "98")
        month: Month text, optional
        day: Day text, optional
        today: Reference date, defaults to the current date

    Returns:
        The date, or None if the year is missing or the parts do not form
        a valid calendar date

    Examples:
        >>> date_from_parts("2019", "2", "")
        datetime.date(2019, 2, 1)
        >>> date_from_parts("2019", "2", "30") is None
        True
    """
    today = today or date.today()

    year_value = _to_int(year)
    if year_value is None or year_value <= 0:
        return None

    year_value = min(year_value, today.year)
    if year_value < 100:
        year_value += (today.year // 100) * 100
        if year_value > today.year:
            year_value -= 100

    month_value = max(_to_int(month) or 1, 1)
    day_value = max(_to_int(day) or 1, 1)

    try:
        return date(year_value, month_value, day_value)
    except ValueError:
        return None
