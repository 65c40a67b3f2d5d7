import asyncio
from datetime import date, timedelta
from decimal import Decimal

import pytest

from carecore.errors import (
    AuthorizationExhaustedError,
    NoMatchingAuthorizationError,
    PermissionDeniedError,
    ValidationError,
)
from carecore.models import AuthorizationStatus, TaskCategory
from carecore.authorizations import refresh_status, service_code_for, units_for_minutes

from conftest import CLIENT, make_authorization, make_task


def test_service_code_mapping():
    assert service_code_for(TaskCategory.BATHING) == "T1019"
    assert service_code_for(TaskCategory.HOUSEKEEPING) == "S5130"
    assert service_code_for(TaskCategory.COMPANIONSHIP) == "S5135"
    assert service_code_for(TaskCategory.DOCUMENTATION) is None


def test_units_round_up():
    assert units_for_minutes(15) == Decimal("1")
    assert units_for_minutes(16) == Decimal("2")
    assert units_for_minutes(60) == Decimal("4")


def test_remaining_derived_from_authorized():
    auth = make_authorization(authorized_units=Decimal("20"), units_used=Decimal("5"), adjusted_units=Decimal("3"))
    assert auth.units_remaining == Decimal("12")


@pytest.mark.asyncio
async def test_deduct_within_balance(ledger, auth_repo, caregiver):
    auth = await auth_repo.create(make_authorization())
    before = auth.units_used + auth.units_remaining

    updated = await ledger.deduct_units(auth.id, Decimal("7"), caregiver)

    assert updated.units_used == Decimal("7")
    assert updated.units_remaining == Decimal("33")
    assert updated.units_used + updated.units_remaining == before
    assert updated.version == auth.version + 1


@pytest.mark.asyncio
async def test_deduct_over_balance_leaves_record_untouched(ledger, auth_repo, caregiver):
    auth = await auth_repo.create(make_authorization(authorized_units=Decimal("5")))

    with pytest.raises(AuthorizationExhaustedError):
        await ledger.deduct_units(auth.id, Decimal("6"), caregiver)

    stored = await auth_repo.get(auth.id)
    assert stored.units_used == Decimal("0")
    assert stored.units_remaining == Decimal("5")
    assert stored.version == auth.version


@pytest.mark.asyncio
async def test_deduct_rejects_non_positive(ledger, auth_repo, caregiver):
    auth = await auth_repo.create(make_authorization())
    with pytest.raises(ValidationError):
        await ledger.deduct_units(auth.id, 0, caregiver)


@pytest.mark.asyncio
async def test_deduct_requires_permission(ledger, auth_repo, coordinator):
    auth = await auth_repo.create(make_authorization())
    with pytest.raises(PermissionDeniedError):
        await ledger.deduct_units(auth.id, 1, coordinator)


@pytest.mark.asyncio
async def test_concurrent_deductions_never_overdraw(ledger, auth_repo, caregiver):
    auth = await auth_repo.create(make_authorization(authorized_units=Decimal("10")))

    results = await asyncio.gather(
        *(ledger.deduct_units(auth.id, Decimal("3"), caregiver) for _ in range(5)),
        return_exceptions=True,
    )

    succeeded = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, AuthorizationExhaustedError)]
    assert len(succeeded) == 3
    assert len(failed) == 2

    stored = await auth_repo.get(auth.id)
    assert stored.units_used == Decimal("9")
    assert stored.units_remaining == Decimal("1")


@pytest.mark.asyncio
async def test_applicable_authorization_prefers_soonest_expiry(ledger, auth_repo):
    today = date.today()
    later = await auth_repo.create(make_authorization(authorization_number="A", effective_to=today + timedelta(days=120)))
    sooner = await auth_repo.create(make_authorization(authorization_number="B", effective_to=today + timedelta(days=20)))
    await auth_repo.create(make_authorization(authorization_number="C", service_code="S5130"))
    await auth_repo.create(make_authorization(
        authorization_number="D", effective_to=today + timedelta(days=5), units_used=Decimal("40"),
    ))

    found = await ledger.find_applicable_authorization(CLIENT, TaskCategory.BATHING, today)
    assert found.id == sooner.id
    assert found.id != later.id


@pytest.mark.asyncio
async def test_no_applicable_authorization(ledger, auth_repo):
    today = date.today()
    await auth_repo.create(make_authorization(status=AuthorizationStatus.SUSPENDED))
    await auth_repo.create(make_authorization(effective_from=today + timedelta(days=1)))

    with pytest.raises(NoMatchingAuthorizationError):
        await ledger.find_applicable_authorization(CLIENT, TaskCategory.BATHING, today)
    with pytest.raises(NoMatchingAuthorizationError):
        await ledger.find_applicable_authorization(CLIENT, TaskCategory.DOCUMENTATION, today)


@pytest.mark.asyncio
async def test_deduct_for_task(ledger, auth_repo, caregiver):
    auth = await auth_repo.create(make_authorization())
    updated = await ledger.deduct_for_task(make_task(), 4, caregiver)
    assert updated.id == auth.id
    assert updated.units_remaining == Decimal("36")


def test_refresh_status():
    today = date(2024, 6, 1)
    auth = make_authorization(effective_from=date(2024, 1, 1), effective_to=date(2024, 12, 31))
    assert refresh_status(auth, today, expiring_soon_days=30) == AuthorizationStatus.ACTIVE
    assert refresh_status(auth, date(2024, 12, 15), expiring_soon_days=30) == AuthorizationStatus.EXPIRING_SOON
    assert refresh_status(auth, date(2025, 1, 1), expiring_soon_days=30) == AuthorizationStatus.EXPIRED

    suspended = auth.model_copy(update={"status": AuthorizationStatus.SUSPENDED})
    assert refresh_status(suspended, date(2025, 1, 1)) == AuthorizationStatus.SUSPENDED


@pytest.mark.asyncio
async def test_refresh_statuses_persists_changes(ledger, auth_repo):
    today = date.today()
    await auth_repo.create(make_authorization(effective_to=today + timedelta(days=3)))
    await auth_repo.create(make_authorization(effective_to=today + timedelta(days=200)))

    changed = await ledger.refresh_statuses(CLIENT, today)

    assert [a.status for a in changed] == [AuthorizationStatus.EXPIRING_SOON]
