"""
Care Plan Templates

Pre-built plans for common home-care scenarios. Coordinators pick a template
and get a draft plan with goals and task templates already filled in.

Templates use a simplified vocabulary (category, frequency, priority) that is
mapped onto the full plan model when a plan is built from one.
"""

from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from carecore.models import (
    CarePlanType,
    CreateCarePlanInput,
    Frequency,
    FrequencyPattern,
    Goal,
    TaskCategory,
    TaskTemplate,
)


# =============================================================================
# Template vocabulary
# =============================================================================

class TemplateCategory(str, Enum):
    PERSONAL_CARE = "personal_care"
    SKILLED_NURSING = "skilled_nursing"
    COMPANIONSHIP = "companionship"
    MEMORY_CARE = "memory_care"
    POST_HOSPITAL = "post_hospital"


class TemplateTaskCategory(str, Enum):
    MEDICATION = "medication"
    VITAL_SIGNS = "vital_signs"
    PERSONAL_CARE = "personal_care"
    MEAL_PREP = "meal_prep"
    MOBILITY = "mobility"
    SAFETY_CHECK = "safety_check"
    DOCUMENTATION = "documentation"
    OTHER = "other"


class TemplateFrequency(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    AS_NEEDED = "as_needed"


class TemplatePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


TASK_CATEGORY_MAP: dict[TemplateTaskCategory, TaskCategory] = {
    TemplateTaskCategory.MEDICATION: TaskCategory.MEDICATION,
    TemplateTaskCategory.VITAL_SIGNS: TaskCategory.MONITORING,
    TemplateTaskCategory.PERSONAL_CARE: TaskCategory.BATHING,
    TemplateTaskCategory.MEAL_PREP: TaskCategory.MEAL_PREPARATION,
    TemplateTaskCategory.MOBILITY: TaskCategory.MOBILITY,
    TemplateTaskCategory.SAFETY_CHECK: TaskCategory.MONITORING,
    TemplateTaskCategory.DOCUMENTATION: TaskCategory.DOCUMENTATION,
    TemplateTaskCategory.OTHER: TaskCategory.OTHER,
}

# ONCE has no pattern of its own
FREQUENCY_MAP: dict[TemplateFrequency, FrequencyPattern] = {
    TemplateFrequency.ONCE: FrequencyPattern.CUSTOM,
    TemplateFrequency.DAILY: FrequencyPattern.DAILY,
    TemplateFrequency.WEEKLY: FrequencyPattern.WEEKLY,
    TemplateFrequency.AS_NEEDED: FrequencyPattern.AS_NEEDED,
}

PLAN_TYPE_MAP: dict[TemplateCategory, CarePlanType] = {
    TemplateCategory.PERSONAL_CARE: CarePlanType.PERSONAL_CARE,
    TemplateCategory.SKILLED_NURSING: CarePlanType.SKILLED_NURSING,
    TemplateCategory.COMPANIONSHIP: CarePlanType.COMPANION,
    TemplateCategory.MEMORY_CARE: CarePlanType.PERSONAL_CARE,
    TemplateCategory.POST_HOSPITAL: CarePlanType.PERSONAL_CARE,
}


def map_task_category(category: TemplateTaskCategory) -> TaskCategory:
    return TASK_CATEGORY_MAP[category]


def map_frequency(frequency: TemplateFrequency) -> FrequencyPattern:
    return FREQUENCY_MAP[frequency]


# =============================================================================
# Template models
# =============================================================================

class TemplateTask(BaseModel):
    description: str
    category: TemplateTaskCategory
    frequency: TemplateFrequency
    priority: TemplatePriority
    estimated_duration_minutes: int = Field(..., gt=0)
    scheduled_time: str | None = Field(default=None, description="HH:MM")
    instructions: str = ""

    def to_task_template(self) -> TaskTemplate:
        """Expand into a plan task template."""
        return TaskTemplate(
            name=self.description,
            category=map_task_category(self.category),
            frequency=Frequency(
                pattern=map_frequency(self.frequency),
                specific_times=[self.scheduled_time] if self.scheduled_time else None,
            ),
            estimated_duration=self.estimated_duration_minutes,
            instructions=self.instructions,
            is_optional=self.priority == TemplatePriority.LOW,
            allow_skip=self.priority != TemplatePriority.CRITICAL,
        )


class CarePlanTemplate(BaseModel):
    id: str
    name: str
    description: str
    category: TemplateCategory
    typical_duration_days: int = Field(..., gt=0)
    goals: str
    tasks: list[TemplateTask] = Field(default_factory=list)

    def goal_statements(self) -> list[str]:
        """Split the goals paragraph into one statement per sentence."""
        return [s.strip().rstrip(".") for s in self.goals.split(". ") if s.strip()]

    def to_create_input(
        self,
        client_id: str,
        effective_date: date,
        name: str | None = None,
        coordinator_id: str | None = None,
    ) -> CreateCarePlanInput:
        """
        Build a draft plan from this template.

        The plan expires `typical_duration_days` after `effective_date`.
        Critical tasks cannot be skipped; low-priority tasks are optional.
        """
        return CreateCarePlanInput(
            name=name or self.name,
            client_id=client_id,
            plan_type=PLAN_TYPE_MAP[self.category],
            effective_date=effective_date,
            expiration_date=effective_date + timedelta(days=self.typical_duration_days),
            coordinator_id=coordinator_id,
            goals=[Goal(name=statement) for statement in self.goal_statements()],
            task_templates=[task.to_task_template() for task in self.tasks],
        )


# =============================================================================
# Template library
# =============================================================================

CARE_PLAN_TEMPLATES: list[CarePlanTemplate] = [
    CarePlanTemplate(
        id="personal-care-standard",
        name="Standard Personal Care",
        description="General personal care assistance for clients needing help with ADLs",
        category=TemplateCategory.PERSONAL_CARE,
        typical_duration_days=90,
        goals=(
            "Maintain client independence and dignity while providing assistance with "
            "activities of daily living (ADLs). Ensure client safety, hygiene, and comfort."
        ),
        tasks=[
            TemplateTask(
                description="Assist with bathing and personal hygiene",
                category=TemplateTaskCategory.PERSONAL_CARE,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="09:00",
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=45,
                instructions=(
                    "Ensure water temperature is safe. Use non-slip mat. "
                    "Assist as needed while maintaining client dignity."
                ),
            ),
            TemplateTask(
                description="Assist with dressing",
                category=TemplateTaskCategory.PERSONAL_CARE,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="09:45",
                priority=TemplatePriority.MEDIUM,
                estimated_duration_minutes=20,
                instructions=(
                    "Allow client to choose clothing. Assist as needed. "
                    "Check for skin irritation or pressure sores."
                ),
            ),
            TemplateTask(
                description="Prepare and assist with meals",
                category=TemplateTaskCategory.MEAL_PREP,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="12:00",
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=60,
                instructions="Follow dietary restrictions. Ensure adequate hydration. Note any changes in appetite.",
            ),
            TemplateTask(
                description="Light housekeeping",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.LOW,
                estimated_duration_minutes=30,
                instructions="Maintain clean and safe environment. Focus on high-traffic areas.",
            ),
            TemplateTask(
                description="Medication reminder",
                category=TemplateTaskCategory.MEDICATION,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="08:00",
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=10,
                instructions="Verify medications against list. Observe client taking medication. Document.",
            ),
            TemplateTask(
                description="Safety check",
                category=TemplateTaskCategory.SAFETY_CHECK,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=10,
                instructions=(
                    "Check for hazards. Ensure emergency devices are working. "
                    "Verify contact information is current."
                ),
            ),
        ],
    ),
    CarePlanTemplate(
        id="post-hospital-recovery",
        name="Post-Hospital Recovery",
        description="Intensive care for clients recovering from hospital stay",
        category=TemplateCategory.POST_HOSPITAL,
        typical_duration_days=30,
        goals=(
            "Support safe transition from hospital to home. Monitor recovery progress. "
            "Prevent hospital readmission. Restore independence gradually."
        ),
        tasks=[
            TemplateTask(
                description="Check vital signs (BP, pulse, temperature)",
                category=TemplateTaskCategory.VITAL_SIGNS,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="09:00",
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=15,
                instructions="Record all vitals. Report abnormal readings immediately. Know client baseline values.",
            ),
            TemplateTask(
                description="Medication administration per doctor orders",
                category=TemplateTaskCategory.MEDICATION,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=20,
                instructions=(
                    "Follow hospital discharge instructions exactly. "
                    "Watch for side effects. Document administration."
                ),
            ),
            TemplateTask(
                description="Wound care and dressing changes",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=30,
                instructions="Follow sterile technique. Check for signs of infection. Document wound appearance.",
            ),
            TemplateTask(
                description="Assist with prescribed exercises",
                category=TemplateTaskCategory.MOBILITY,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=30,
                instructions="Follow physical therapy plan. Do not overexert client. Report pain or difficulty.",
            ),
            TemplateTask(
                description="Monitor food and fluid intake",
                category=TemplateTaskCategory.MEAL_PREP,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=15,
                instructions="Document intake. Watch for appetite changes. Ensure adequate hydration.",
            ),
            TemplateTask(
                description="Communication with family and care team",
                category=TemplateTaskCategory.DOCUMENTATION,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=20,
                instructions=(
                    "Update family on progress. Report concerns to coordinator. "
                    "Document all communications."
                ),
            ),
        ],
    ),
    CarePlanTemplate(
        id="memory-care-dementia",
        name="Memory Care (Dementia/Alzheimer's)",
        description="Specialized care for clients with cognitive impairment",
        category=TemplateCategory.MEMORY_CARE,
        typical_duration_days=180,
        goals=(
            "Provide safe, structured environment. Maintain cognitive function. "
            "Reduce anxiety and confusion. Support caregiver family members."
        ),
        tasks=[
            TemplateTask(
                description="Establish daily routine",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=20,
                instructions="Maintain consistent schedule. Use visual cues. Reduce changes and surprises.",
            ),
            TemplateTask(
                description="Cognitive stimulation activities",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="14:00",
                priority=TemplatePriority.MEDIUM,
                estimated_duration_minutes=60,
                instructions="Use memory games, music, reminiscence therapy. Adapt to client ability level.",
            ),
            TemplateTask(
                description="Safety monitoring",
                category=TemplateTaskCategory.SAFETY_CHECK,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=30,
                instructions="Prevent wandering. Remove hazards. Monitor for agitation or sundowning.",
            ),
            TemplateTask(
                description="Personal care with reassurance",
                category=TemplateTaskCategory.PERSONAL_CARE,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=60,
                instructions="Use calm, simple language. Allow extra time. Maintain dignity and respect.",
            ),
            TemplateTask(
                description="Medication management",
                category=TemplateTaskCategory.MEDICATION,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=15,
                instructions="Supervise all medications. Watch for side effects. Report behavioral changes.",
            ),
            TemplateTask(
                description="Document behavior and mood changes",
                category=TemplateTaskCategory.DOCUMENTATION,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=15,
                instructions="Note triggers for agitation. Track sleep patterns. Document appetite and hydration.",
            ),
        ],
    ),
    CarePlanTemplate(
        id="companionship-light-care",
        name="Companionship & Light Care",
        description="Social engagement and light assistance for relatively independent clients",
        category=TemplateCategory.COMPANIONSHIP,
        typical_duration_days=120,
        goals=(
            "Reduce social isolation. Provide mental stimulation. "
            "Assist with light household tasks. Monitor general wellbeing."
        ),
        tasks=[
            TemplateTask(
                description="Social engagement and conversation",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.MEDIUM,
                estimated_duration_minutes=90,
                instructions="Engage in meaningful conversation. Discuss interests, memories, current events.",
            ),
            TemplateTask(
                description="Assist with errands and shopping",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.WEEKLY,
                priority=TemplatePriority.MEDIUM,
                estimated_duration_minutes=120,
                instructions="Help with grocery shopping, pharmacy pickups, appointments.",
            ),
            TemplateTask(
                description="Light meal preparation",
                category=TemplateTaskCategory.MEAL_PREP,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.MEDIUM,
                estimated_duration_minutes=45,
                instructions="Prepare simple, nutritious meals. Follow any dietary restrictions.",
            ),
            TemplateTask(
                description="Recreation and activities",
                category=TemplateTaskCategory.OTHER,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.MEDIUM,
                estimated_duration_minutes=60,
                instructions="Games, puzzles, crafts, walks, gardening based on client interests.",
            ),
            TemplateTask(
                description="Medication reminder",
                category=TemplateTaskCategory.MEDICATION,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=10,
                instructions="Remind client to take medications. Client self-administers.",
            ),
        ],
    ),
    CarePlanTemplate(
        id="skilled-nursing-diabetes",
        name="Skilled Nursing - Diabetes Management",
        description="Specialized care for clients requiring diabetes management",
        category=TemplateCategory.SKILLED_NURSING,
        typical_duration_days=90,
        goals=(
            "Maintain blood sugar control. Prevent complications. "
            "Educate client on self-management. Monitor for emergency situations."
        ),
        tasks=[
            TemplateTask(
                description="Blood glucose monitoring",
                category=TemplateTaskCategory.VITAL_SIGNS,
                frequency=TemplateFrequency.DAILY,
                scheduled_time="08:00",
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=10,
                instructions="Test before meals and at bedtime. Record all readings. Know client target range.",
            ),
            TemplateTask(
                description="Insulin administration",
                category=TemplateTaskCategory.MEDICATION,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=15,
                instructions="Follow doctor orders precisely. Rotate injection sites. Monitor for reactions.",
            ),
            TemplateTask(
                description="Foot care and inspection",
                category=TemplateTaskCategory.PERSONAL_CARE,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=20,
                instructions="Check for cuts, blisters, redness. Keep feet clean and dry. Report any concerns.",
            ),
            TemplateTask(
                description="Meal planning and monitoring",
                category=TemplateTaskCategory.MEAL_PREP,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=60,
                instructions="Follow diabetic diet plan. Count carbohydrates. Ensure consistent meal times.",
            ),
            TemplateTask(
                description="Education on diabetes management",
                category=TemplateTaskCategory.DOCUMENTATION,
                frequency=TemplateFrequency.WEEKLY,
                priority=TemplatePriority.HIGH,
                estimated_duration_minutes=30,
                instructions="Teach about diet, exercise, medication. Empower client for self-care.",
            ),
            TemplateTask(
                description="Monitor for hypo/hyperglycemia",
                category=TemplateTaskCategory.SAFETY_CHECK,
                frequency=TemplateFrequency.DAILY,
                priority=TemplatePriority.CRITICAL,
                estimated_duration_minutes=15,
                instructions="Know symptoms. Have glucose tablets available. Know emergency protocol.",
            ),
        ],
    ),
]


def get_all_templates() -> list[CarePlanTemplate]:
    return list(CARE_PLAN_TEMPLATES)


def get_template_by_id(template_id: str) -> CarePlanTemplate | None:
    return next((t for t in CARE_PLAN_TEMPLATES if t.id == template_id), None)


def get_templates_by_category(category: TemplateCategory) -> list[CarePlanTemplate]:
    return [t for t in CARE_PLAN_TEMPLATES if t.category == category]
