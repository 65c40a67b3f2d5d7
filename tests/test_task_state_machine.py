from datetime import datetime, timezone

import pytest

from carecore.errors import ValidationError
from carecore.models import (
    CompleteTaskInput,
    GeoLocation,
    Signature,
    TaskStatus,
    VerificationData,
    VitalSigns,
)
from carecore.tasks import TaskStateMachine, check_completion_requirements, check_vital_signs

from conftest import make_task

NOW = datetime(2024, 5, 1, 14, 30, tzinfo=timezone.utc)


def _signature():
    return Signature(signature_data="aGVsbG8=", signed_by="client-1", signed_by_name="Pat Client")


def test_start_moves_to_in_progress():
    machine = TaskStateMachine()
    started = machine.start(make_task(), actor_id="cg-1", now=NOW)
    assert started.status == TaskStatus.IN_PROGRESS
    assert started.started_at == NOW


def test_start_rejects_non_scheduled():
    machine = TaskStateMachine()
    with pytest.raises(ValidationError):
        machine.start(make_task(status=TaskStatus.IN_PROGRESS), actor_id="cg-1")


@pytest.mark.parametrize("status", [TaskStatus.COMPLETED, TaskStatus.CANCELLED])
def test_closed_tasks_reject_complete_and_skip(status):
    machine = TaskStateMachine()
    task = make_task(status=status)

    with pytest.raises(ValidationError):
        machine.complete(task, CompleteTaskInput(), actor_id="cg-1")
    with pytest.raises(ValidationError):
        machine.skip(task, "Client refused", actor_id="cg-1")


def test_complete_already_completed_message():
    machine = TaskStateMachine()
    with pytest.raises(ValidationError) as exc:
        machine.complete(make_task(status=TaskStatus.COMPLETED), CompleteTaskInput(), actor_id="cg-1")
    assert exc.value.message == "Task is already completed"


@pytest.mark.parametrize("status", [TaskStatus.SKIPPED, TaskStatus.MISSED, TaskStatus.ISSUE_REPORTED])
def test_no_transition_leaves_terminal_state(status):
    machine = TaskStateMachine()
    task = make_task(status=status)
    with pytest.raises(ValidationError):
        machine.complete(task, CompleteTaskInput(), actor_id="cg-1")
    with pytest.raises(ValidationError):
        machine.report_issue(task, "Spill", actor_id="cg-1")
    with pytest.raises(ValidationError):
        machine.cancel(task, actor_id="cg-1")


def test_missing_signature_and_note_are_both_reported():
    task = make_task(required_signature=True, required_note=True)
    errors = check_completion_requirements(task, CompleteTaskInput(completion_note="   "))
    assert errors == [
        "Signature is required for this task",
        "Completion note is required for this task",
    ]

    machine = TaskStateMachine()
    with pytest.raises(ValidationError) as exc:
        machine.complete(task, CompleteTaskInput(), actor_id="cg-1")
    assert "Signature is required for this task" in exc.value.errors


def test_complete_with_signature_stamps_every_timestamp():
    machine = TaskStateMachine()
    task = make_task(required_signature=True)
    completion = CompleteTaskInput(
        completion_note="Bath done",
        signature=_signature(),
        verification_data=VerificationData(
            gps_location=GeoLocation(latitude=30.27, longitude=-97.74),
        ),
    )

    done = machine.complete(task, completion, actor_id="cg-1", now=NOW)

    assert done.status == TaskStatus.COMPLETED
    assert done.completed_at == NOW
    assert done.completed_by == "cg-1"
    assert done.completion_note == "Bath done"
    assert done.completion_signature.signed_at == NOW
    assert done.verification_data.verified_at == NOW
    assert done.verification_data.verified_by == "cg-1"
    assert done.verification_data.gps_location.timestamp == NOW
    assert done.updated_by == "cg-1"
    # Input is not mutated
    assert task.status == TaskStatus.SCHEDULED


def test_out_of_range_vitals_do_not_block():
    machine = TaskStateMachine()
    completion = CompleteTaskInput(
        verification_data=VerificationData(
            vital_signs=VitalSigns(blood_pressure_systolic=195, oxygen_saturation=85),
        ),
    )
    done = machine.complete(make_task(), completion, actor_id="cg-1", now=NOW)
    assert done.status == TaskStatus.COMPLETED


def test_vital_sign_warnings():
    warnings = check_vital_signs(VitalSigns(
        blood_pressure_systolic=181,
        blood_pressure_diastolic=121,
        oxygen_saturation=89,
        temperature=40,
        temperature_unit="C",
    ))
    assert len(warnings) == 4
    assert "Temperature is critically high" in warnings

    assert check_vital_signs(VitalSigns(temperature=94.5)) == ["Temperature is critically low"]
    assert check_vital_signs(VitalSigns(blood_pressure_systolic=120, oxygen_saturation=97)) == []


def test_skip_requires_reason():
    machine = TaskStateMachine()
    with pytest.raises(ValidationError):
        machine.skip(make_task(), "  ", actor_id="cg-1")


def test_skip_accepts_free_text_reason():
    machine = TaskStateMachine()
    task = make_task(skip_reasons=["Client refused"])
    skipped = machine.skip(task, "Client at daughter's house", actor_id="cg-1", note="Call ahead", now=NOW)
    assert skipped.status == TaskStatus.SKIPPED
    assert skipped.skip_reason == "Client at daughter's house"
    assert skipped.skip_note == "Call ahead"
    assert skipped.skipped_at == NOW
    assert skipped.skipped_by == "cg-1"


def test_report_issue_from_in_progress():
    machine = TaskStateMachine()
    task = make_task(status=TaskStatus.IN_PROGRESS)
    flagged = machine.report_issue(task, "Shower chair broken", actor_id="cg-1", now=NOW)
    assert flagged.status == TaskStatus.ISSUE_REPORTED
    assert flagged.issue_reported is True
    assert flagged.issue_reported_at == NOW
    assert flagged.issue_reported_by == "cg-1"


def test_cancel_and_mark_missed():
    machine = TaskStateMachine()
    cancelled = machine.cancel(make_task(), actor_id="coord-1", reason="Visit cancelled", now=NOW)
    assert cancelled.status == TaskStatus.CANCELLED
    assert cancelled.cancellation_reason == "Visit cancelled"

    missed = machine.mark_missed(make_task(), actor_id="system", now=NOW)
    assert missed.status == TaskStatus.MISSED
    assert missed.missed_at == NOW
