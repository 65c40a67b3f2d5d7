from datetime import date, timedelta
from decimal import Decimal

import pytest

from carecore.auth import RolePermissionPolicy, UserContext, UserRole
from carecore.authorizations import AuthorizationLedger
from carecore.models import (
    AuthorizationStatus,
    CarePlan,
    Frequency,
    FrequencyPattern,
    Goal,
    Intervention,
    InterventionCategory,
    Jurisdiction,
    JurisdictionData,
    ServiceAuthorization,
    TaskCategory,
    TaskInstance,
    TaskTemplate,
)
from carecore.plans import CarePlanAnalyticsService, CarePlanService, ProgressNoteService
from carecore.storage import (
    InMemoryAuthorizationRepository,
    InMemoryCarePlanRepository,
    InMemoryProgressNoteRepository,
    InMemoryTaskInstanceRepository,
)
from carecore.tasks import TaskService

ORG = "org-1"
OTHER_ORG = "org-2"
CLIENT = "client-1"


def make_plan(**overrides) -> CarePlan:
    """A plan that passes readiness and the TX blocking rules."""
    fields = dict(
        name="Personal care plan",
        plan_number="CP-TEST-0001",
        client_id=CLIENT,
        organization_id=ORG,
        effective_date=date.today() - timedelta(days=1),
        expiration_date=date.today() + timedelta(days=180),
        coordinator_id="coord-1",
        assessment_summary="Client needs help with bathing and dressing after hip surgery in March.",
        goals=[Goal(name="Bathe independently")],
        interventions=[
            Intervention(
                name="Bathing assistance",
                category=InterventionCategory.ASSISTANCE_WITH_ADL,
                frequency=Frequency(pattern=FrequencyPattern.DAILY),
            )
        ],
        task_templates=[
            TaskTemplate(
                name="Assist with bath",
                category=TaskCategory.BATHING,
                frequency=Frequency(pattern=FrequencyPattern.DAILY),
                estimated_duration=30,
                requires_signature=True,
            )
        ],
        jurisdiction=Jurisdiction.TX,
        jurisdiction_data=JurisdictionData(
            ordering_provider_name="Dr. Rivera",
            ordering_provider_license="TX-12345",
            order_date=date.today() - timedelta(days=3),
            disaster_plan_on_file=True,
        ),
    )
    fields.update(overrides)
    return CarePlan(**fields)


def make_task(**overrides) -> TaskInstance:
    fields = dict(
        care_plan_id="plan-1",
        client_id=CLIENT,
        organization_id=ORG,
        name="Assist with bath",
        category=TaskCategory.BATHING,
        scheduled_date=date.today(),
    )
    fields.update(overrides)
    return TaskInstance(**fields)


def make_authorization(**overrides) -> ServiceAuthorization:
    fields = dict(
        authorization_number="AUTH-1",
        client_id=CLIENT,
        organization_id=ORG,
        payer="Medicaid",
        service_code="T1019",
        authorized_units=Decimal("40"),
        effective_from=date.today() - timedelta(days=10),
        effective_to=date.today() + timedelta(days=90),
        status=AuthorizationStatus.ACTIVE,
    )
    fields.update(overrides)
    return ServiceAuthorization(**fields)


@pytest.fixture
def policy():
    return RolePermissionPolicy()


@pytest.fixture
def coordinator():
    return UserContext(user_id="coord-1", organization_id=ORG, roles=[UserRole.COORDINATOR])


@pytest.fixture
def caregiver():
    return UserContext(user_id="cg-1", organization_id=ORG, roles=[UserRole.CAREGIVER])


@pytest.fixture
def admin():
    return UserContext(user_id="admin-1", organization_id=ORG, roles=[UserRole.ADMIN])


@pytest.fixture
def outsider():
    return UserContext(user_id="coord-9", organization_id=OTHER_ORG, roles=[UserRole.COORDINATOR])


@pytest.fixture
def plan_repo():
    return InMemoryCarePlanRepository()


@pytest.fixture
def task_repo():
    return InMemoryTaskInstanceRepository()


@pytest.fixture
def auth_repo():
    return InMemoryAuthorizationRepository()


@pytest.fixture
def note_repo():
    return InMemoryProgressNoteRepository()


@pytest.fixture
def ledger(auth_repo, policy):
    return AuthorizationLedger(auth_repo, policy)


@pytest.fixture
def task_service(task_repo, policy):
    return TaskService(task_repo, policy)


@pytest.fixture
def billing_task_service(task_repo, policy, ledger):
    return TaskService(task_repo, policy, ledger=ledger)


@pytest.fixture
def plan_service(plan_repo, task_service, policy):
    return CarePlanService(plan_repo, task_service, policy)


@pytest.fixture
def note_service(note_repo, plan_service, policy):
    return ProgressNoteService(note_repo, plan_service, policy)


@pytest.fixture
def analytics_service(plan_repo, task_repo, policy):
    return CarePlanAnalyticsService(plan_repo, task_repo, policy)

