"""Billing calendar arithmetic."""

from datetime import UTC, date, datetime


def first_of_next_month(reference: date) -> datetime:
    """
    Return midnight UTC on the first day of the month after ``reference``.

    December rolls over to January of the following year.

    Args:
        reference: Any date (or datetime) in the current billing month

    Returns:
        Aware UTC datetime at 00:00:00

    Example:
        first_of_next_month(date(2021, 6, 15))  # 2021-07-01 00:00:00+00:00
        first_of_next_month(date(2021, 12, 1))  # 2022-01-01 00:00:00+00:00
    """
    if reference.month == 12:
        return datetime(reference.year + 1, 1, 1, tzinfo=UTC)
    return datetime(reference.year, reference.month + 1, 1, tzinfo=UTC)
