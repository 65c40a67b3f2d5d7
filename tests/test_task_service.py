from datetime import date, timedelta
from decimal import Decimal

import pytest

from carecore.errors import (
    AuthorizationExhaustedError,
    NoMatchingAuthorizationError,
    NotFoundError,
    PermissionDeniedError,
    StaleWriteError,
    ValidationError,
)
from carecore.models import (
    CompleteTaskInput,
    CreateTaskInstanceInput,
    Signature,
    TaskCategory,
    TaskStatus,
)
from carecore.storage import TaskFilters

from conftest import CLIENT, make_authorization


def _input(**overrides):
    fields = dict(
        care_plan_id="plan-1",
        visit_id="visit-1",
        client_id=CLIENT,
        name="Assist with bath",
        category=TaskCategory.BATHING,
        scheduled_date=date.today(),
        estimated_duration=30,
    )
    fields.update(overrides)
    return CreateTaskInstanceInput(**fields)


@pytest.mark.asyncio
async def test_create_task_is_scheduled_in_caller_org(task_service, coordinator):
    task = await task_service.create_task_instance(_input(), coordinator)
    assert task.status == TaskStatus.SCHEDULED
    assert task.organization_id == coordinator.organization_id
    assert task.created_by == coordinator.user_id
    assert task.version == 1


@pytest.mark.asyncio
async def test_caregiver_cannot_create_tasks(task_service, caregiver):
    with pytest.raises(PermissionDeniedError):
        await task_service.create_task_instance(_input(), caregiver)


@pytest.mark.asyncio
async def test_get_task_across_organizations_is_denied(task_service, coordinator, outsider):
    task = await task_service.create_task_instance(_input(), coordinator)
    with pytest.raises(PermissionDeniedError):
        await task_service.get_task_instance_by_id(task.id, outsider)


@pytest.mark.asyncio
async def test_get_missing_task(task_service, coordinator):
    with pytest.raises(NotFoundError):
        await task_service.get_task_instance_by_id("nope", coordinator)


@pytest.mark.asyncio
async def test_complete_bumps_version(task_service, coordinator, caregiver):
    task = await task_service.create_task_instance(_input(), coordinator)
    started = await task_service.start_task(task.id, caregiver)
    assert started.version == 2

    done = await task_service.complete_task(task.id, CompleteTaskInput(completion_note="ok"), caregiver)
    assert done.status == TaskStatus.COMPLETED
    assert done.version == 3

    with pytest.raises(ValidationError):
        await task_service.complete_task(task.id, CompleteTaskInput(), caregiver)
    with pytest.raises(ValidationError):
        await task_service.skip_task(task.id, "Client refused", caregiver)


@pytest.mark.asyncio
async def test_signature_required_through_service(task_service, coordinator, caregiver):
    task = await task_service.create_task_instance(_input(required_signature=True), coordinator)

    with pytest.raises(ValidationError) as exc:
        await task_service.complete_task(task.id, CompleteTaskInput(), caregiver)
    assert exc.value.errors == ["Signature is required for this task"]

    signature = Signature(signature_data="aGVsbG8=", signed_by=CLIENT, signed_by_name="Pat Client")
    done = await task_service.complete_task(task.id, CompleteTaskInput(signature=signature), caregiver)
    assert done.status == TaskStatus.COMPLETED
    assert done.completion_signature.signed_at == done.completed_at


@pytest.mark.asyncio
async def test_coordinator_cannot_complete(task_service, coordinator):
    task = await task_service.create_task_instance(_input(), coordinator)
    with pytest.raises(PermissionDeniedError):
        await task_service.complete_task(task.id, CompleteTaskInput(), coordinator)


@pytest.mark.asyncio
async def test_stale_write_is_rejected(task_service, task_repo, coordinator):
    task = await task_service.create_task_instance(_input(), coordinator)
    await task_repo.update(task.model_copy(update={"assigned_caregiver_id": "cg-2"}), task.version)

    with pytest.raises(StaleWriteError):
        await task_repo.update(task.model_copy(update={"assigned_caregiver_id": "cg-3"}), task.version)


@pytest.mark.asyncio
async def test_skip_report_cancel_and_miss(task_service, coordinator, caregiver):
    a = await task_service.create_task_instance(_input(), coordinator)
    b = await task_service.create_task_instance(_input(), coordinator)
    c = await task_service.create_task_instance(_input(), coordinator)
    d = await task_service.create_task_instance(_input(), coordinator)

    skipped = await task_service.skip_task(a.id, "Client refused", caregiver, note="Try tomorrow")
    flagged = await task_service.report_task_issue(b.id, "Grab bar loose", caregiver)
    cancelled = await task_service.cancel_task(c.id, coordinator, reason="Hospitalized")
    missed = await task_service.mark_task_missed(d.id, coordinator)

    assert skipped.status == TaskStatus.SKIPPED
    assert flagged.status == TaskStatus.ISSUE_REPORTED
    assert cancelled.status == TaskStatus.CANCELLED
    assert missed.status == TaskStatus.MISSED


@pytest.mark.asyncio
async def test_search_and_visit_lookup_are_org_scoped(task_service, coordinator, outsider):
    await task_service.create_task_instance(_input(), coordinator)
    await task_service.create_task_instance(_input(visit_id="visit-2"), coordinator)

    assert len(await task_service.get_tasks_by_visit_id("visit-1", coordinator)) == 1
    assert await task_service.get_tasks_by_visit_id("visit-1", outsider) == []

    found = await task_service.search_task_instances(
        TaskFilters(organization_id=outsider.organization_id, status=[TaskStatus.SCHEDULED]),
        coordinator,
    )
    assert len(found) == 2


# =============================================================================
# Ledger deduction on completion
# =============================================================================

@pytest.mark.asyncio
async def test_completion_deducts_units(billing_task_service, auth_repo, coordinator, caregiver):
    auth = await auth_repo.create(make_authorization())
    task = await billing_task_service.create_task_instance(_input(), coordinator)

    await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)

    updated = await auth_repo.get(auth.id)
    assert updated.units_used == Decimal("2")  # 30 minutes
    assert updated.units_remaining == Decimal("38")


@pytest.mark.asyncio
async def test_completion_fails_without_authorization(billing_task_service, task_repo, coordinator, caregiver):
    task = await billing_task_service.create_task_instance(_input(), coordinator)

    with pytest.raises(NoMatchingAuthorizationError):
        await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)

    assert (await task_repo.get(task.id)).status == TaskStatus.SCHEDULED


@pytest.mark.asyncio
async def test_completion_fails_when_exhausted(billing_task_service, auth_repo, task_repo, coordinator, caregiver):
    auth = await auth_repo.create(make_authorization(authorized_units=Decimal("1")))
    task = await billing_task_service.create_task_instance(_input(), coordinator)

    with pytest.raises(AuthorizationExhaustedError):
        await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)

    assert (await auth_repo.get(auth.id)).units_remaining == Decimal("1")
    assert (await task_repo.get(task.id)).status == TaskStatus.SCHEDULED


@pytest.mark.asyncio
async def test_non_billable_category_skips_ledger(billing_task_service, coordinator, caregiver):
    task = await billing_task_service.create_task_instance(
        _input(category=TaskCategory.DOCUMENTATION, scheduled_date=date.today() + timedelta(days=1)),
        coordinator,
    )
    done = await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)
    assert done.status == TaskStatus.COMPLETED


@pytest.mark.asyncio
async def test_stale_completion_never_reaches_ledger(
    billing_task_service, task_repo, auth_repo, coordinator, caregiver, monkeypatch
):
    auth = await auth_repo.create(make_authorization())
    task = await billing_task_service.create_task_instance(_input(), coordinator)
    read_task = task_repo.get

    async def read_then_edited_elsewhere(id):
        snapshot = await read_task(id)
        await task_repo.update(snapshot.model_copy(update={"instructions": "Use the shower chair"}), snapshot.version)
        return snapshot

    monkeypatch.setattr(task_repo, "get", read_then_edited_elsewhere)

    with pytest.raises(StaleWriteError):
        await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)

    stored = await auth_repo.get(auth.id)
    assert stored.units_used == Decimal("0")
    assert stored.units_remaining == Decimal("40")
    assert (await read_task(task.id)).status == TaskStatus.SCHEDULED


@pytest.mark.asyncio
async def test_refused_completion_can_be_retried_once_authorized(
    billing_task_service, auth_repo, task_repo, coordinator, caregiver
):
    task = await billing_task_service.create_task_instance(_input(), coordinator)

    with pytest.raises(NoMatchingAuthorizationError):
        await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)

    restored = await task_repo.get(task.id)
    assert restored.status == TaskStatus.SCHEDULED
    assert restored.completed_at is None

    auth = await auth_repo.create(make_authorization())
    done = await billing_task_service.complete_task(task.id, CompleteTaskInput(), caregiver)

    assert done.status == TaskStatus.COMPLETED
    assert (await auth_repo.get(auth.id)).units_used == Decimal("2")
