"""
Recurrence Evaluation

Decides whether a task template's frequency produces an occurrence on a
given calendar date. Pure functions; no clock, no locale.
"""

import calendar
from datetime import date, timedelta

from carecore.models import DayOfWeek, Frequency, FrequencyPattern, FrequencyUnit


def should_fire(frequency: Frequency, candidate_date: date) -> bool:
    """
    Check if an occurrence should be materialized on `candidate_date`.

    Args:
        frequency: Template or intervention frequency
        candidate_date: Visit date being expanded

    Returns:
        True if a task instance should be generated
    """
    pattern = frequency.pattern

    if pattern == FrequencyPattern.DAILY:
        return True

    if pattern == FrequencyPattern.AS_NEEDED:
        # Manual creation only
        return False

    if pattern == FrequencyPattern.WEEKLY:
        if frequency.specific_days:
            return DayOfWeek.from_date(candidate_date) in frequency.specific_days
        return True

    # BI_WEEKLY, MONTHLY, CUSTOM: interval membership needs an anchor
    if frequency.anchor_date is None:
        return True
    if candidate_date < frequency.anchor_date:
        return False

    if pattern == FrequencyPattern.BI_WEEKLY:
        return _fires_biweekly(frequency, candidate_date)
    if pattern == FrequencyPattern.MONTHLY:
        return _fires_monthly(frequency.anchor_date, candidate_date, frequency.interval or 1)
    return _fires_custom(frequency, candidate_date)


def next_occurrences(
    frequency: Frequency,
    start: date,
    count: int,
    horizon_days: int = 366,
) -> list[date]:
    """
    List the next `count` firing dates on or after `start`.

    AS_NEEDED returns an empty list. The search stops after `horizon_days`.
    """
    if frequency.pattern == FrequencyPattern.AS_NEEDED or count <= 0:
        return []

    dates = []
    current = start
    end = start + timedelta(days=horizon_days)
    while current <= end and len(dates) < count:
        if should_fire(frequency, current):
            dates.append(current)
        current += timedelta(days=1)
    return dates


def _week_index(anchor: date, candidate: date) -> int:
    """Whole Monday-based weeks between the anchor's week and the candidate's."""
    anchor_monday = anchor - timedelta(days=anchor.weekday())
    candidate_monday = candidate - timedelta(days=candidate.weekday())
    return (candidate_monday - anchor_monday).days // 7


def _matches_weekday(frequency: Frequency, candidate: date) -> bool:
    if frequency.specific_days:
        return DayOfWeek.from_date(candidate) in frequency.specific_days
    return candidate.weekday() == frequency.anchor_date.weekday()


def _fires_biweekly(frequency: Frequency, candidate: date) -> bool:
    if _week_index(frequency.anchor_date, candidate) % 2:
        return False
    return _matches_weekday(frequency, candidate)


def _months_between(anchor: date, candidate: date) -> int:
    return (candidate.year - anchor.year) * 12 + candidate.month - anchor.month


def _fires_monthly(anchor: date, candidate: date, interval: int) -> bool:
    if _months_between(anchor, candidate) % interval:
        return False
    # Anchor on the 31st falls on the last day of shorter months
    last_day = calendar.monthrange(candidate.year, candidate.month)[1]
    return candidate.day == min(anchor.day, last_day)


def _fires_custom(frequency: Frequency, candidate: date) -> bool:
    interval = frequency.interval or 1
    anchor = frequency.anchor_date

    if frequency.unit == FrequencyUnit.DAYS:
        return (candidate - anchor).days % interval == 0
    if frequency.unit == FrequencyUnit.WEEKS:
        if _week_index(anchor, candidate) % interval:
            return False
        return _matches_weekday(frequency, candidate)
    if frequency.unit == FrequencyUnit.MONTHS:
        return _fires_monthly(anchor, candidate, interval)

    if frequency.specific_days:
        return DayOfWeek.from_date(candidate) in frequency.specific_days
    return True
