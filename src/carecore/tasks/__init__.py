"""
CareCore Tasks

Task instance lifecycle.
"""

from carecore.tasks.state_machine import (
    TaskStateMachine,
    check_completion_requirements,
    check_vital_signs,
)
from carecore.tasks.service import TaskService

__all__ = [
    "TaskStateMachine",
    "TaskService",
    "check_completion_requirements",
    "check_vital_signs",
]
