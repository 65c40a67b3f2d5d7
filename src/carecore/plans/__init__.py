"""
CareCore Care Plans

Plan lifecycle, templates, task generation, progress notes and analytics.
"""

from carecore.plans.readiness import check_activation_readiness
from carecore.plans.templates import (
    CARE_PLAN_TEMPLATES,
    CarePlanTemplate,
    TemplateCategory,
    TemplateTask,
    get_all_templates,
    get_template_by_id,
    get_templates_by_category,
    map_frequency,
    map_task_category,
)
from carecore.plans.service import (
    STATUS_TRANSITIONS,
    CarePlanService,
    compliance_status_for,
    generate_plan_number,
)
from carecore.plans.notes import ProgressNoteService
from carecore.plans.analytics import CarePlanAnalytics, CarePlanAnalyticsService, TaskCompletionMetrics

__all__ = [
    "CARE_PLAN_TEMPLATES",
    "STATUS_TRANSITIONS",
    "CarePlanService",
    "CarePlanAnalytics",
    "CarePlanAnalyticsService",
    "CarePlanTemplate",
    "ProgressNoteService",
    "TaskCompletionMetrics",
    "TemplateCategory",
    "TemplateTask",
    "check_activation_readiness",
    "compliance_status_for",
    "generate_plan_number",
    "get_all_templates",
    "get_template_by_id",
    "get_templates_by_category",
    "map_frequency",
    "map_task_category",
]
