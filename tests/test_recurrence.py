from datetime import date, timedelta

from carecore.models import DayOfWeek, Frequency, FrequencyPattern, FrequencyUnit
from carecore.scheduling import next_occurrences, should_fire

MONDAY = date(2024, 1, 1)


def _days(n: int):
    return [MONDAY + timedelta(days=i) for i in range(n)]


def test_daily_fires_every_date():
    freq = Frequency(pattern=FrequencyPattern.DAILY)
    assert all(should_fire(freq, d) for d in _days(60))


def test_as_needed_never_fires():
    freq = Frequency(pattern=FrequencyPattern.AS_NEEDED, specific_days=[DayOfWeek.MONDAY])
    assert not any(should_fire(freq, d) for d in _days(60))


def test_weekly_specific_days():
    freq = Frequency(
        pattern=FrequencyPattern.WEEKLY,
        specific_days=[DayOfWeek.MONDAY, DayOfWeek.THURSDAY],
    )
    fired = [d for d in _days(14) if should_fire(freq, d)]
    assert fired == [date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 8), date(2024, 1, 11)]


def test_weekly_without_days_fires():
    freq = Frequency(pattern=FrequencyPattern.WEEKLY)
    assert should_fire(freq, date(2024, 1, 6))


def test_interval_patterns_without_anchor_fire():
    for pattern in (FrequencyPattern.BI_WEEKLY, FrequencyPattern.MONTHLY, FrequencyPattern.CUSTOM):
        assert should_fire(Frequency(pattern=pattern), date(2024, 3, 17))


def test_biweekly_with_anchor():
    freq = Frequency(pattern=FrequencyPattern.BI_WEEKLY, anchor_date=date(2024, 1, 3))  # Wednesday
    fired = [d for d in _days(35) if should_fire(freq, d)]
    assert fired == [date(2024, 1, 3), date(2024, 1, 17), date(2024, 1, 31)]


def test_biweekly_with_anchor_and_days():
    freq = Frequency(
        pattern=FrequencyPattern.BI_WEEKLY,
        anchor_date=MONDAY,
        specific_days=[DayOfWeek.MONDAY, DayOfWeek.FRIDAY],
    )
    fired = [d for d in _days(21) if should_fire(freq, d)]
    assert fired == [date(2024, 1, 1), date(2024, 1, 5), date(2024, 1, 15), date(2024, 1, 19)]


def test_dates_before_anchor_never_fire():
    freq = Frequency(pattern=FrequencyPattern.MONTHLY, anchor_date=date(2024, 2, 1))
    assert not should_fire(freq, date(2024, 1, 1))


def test_monthly_clamps_to_month_end():
    freq = Frequency(pattern=FrequencyPattern.MONTHLY, anchor_date=date(2024, 1, 31))
    assert should_fire(freq, date(2024, 2, 29))
    assert not should_fire(freq, date(2024, 2, 28))
    assert should_fire(freq, date(2024, 3, 31))
    assert should_fire(freq, date(2024, 4, 30))


def test_custom_every_three_days():
    freq = Frequency(
        pattern=FrequencyPattern.CUSTOM,
        interval=3,
        unit=FrequencyUnit.DAYS,
        anchor_date=MONDAY,
    )
    assert next_occurrences(freq, MONDAY, 4) == [
        date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 7), date(2024, 1, 10),
    ]


def test_custom_every_two_months():
    freq = Frequency(
        pattern=FrequencyPattern.CUSTOM,
        interval=2,
        unit=FrequencyUnit.MONTHS,
        anchor_date=date(2024, 1, 15),
    )
    assert next_occurrences(freq, date(2024, 1, 1), 3) == [
        date(2024, 1, 15), date(2024, 3, 15), date(2024, 5, 15),
    ]


def test_next_occurrences_as_needed_is_empty():
    assert next_occurrences(Frequency(pattern=FrequencyPattern.AS_NEEDED), MONDAY, 5) == []
