"""
CareCore Scheduling

Recurrence evaluation for task templates.
"""

from carecore.scheduling.recurrence import next_occurrences, should_fire

__all__ = [
    "next_occurrences",
    "should_fire",
]
