from datetime import date, datetime

import pytest

from complianceapi.database import database, task_table
from complianceapi.exceptions import NotFoundError
from complianceapi.models.submission import SubmissionIn
from complianceapi.services import submissions as submission_service
from complianceapi.services import tasks as task_service


async def test_submission_completes_linked_task(insert_task, form, standard_user):
    task_id = await insert_task(recurrence_type="daily", recurrence_interval=1)

    submission = await submission_service.create_submission(
        SubmissionIn(form_id=form.id, task_id=task_id, submission_data={"sanitiser_stocked": True}),
        submitted_by=standard_user.id,
    )

    assert submission.task_id == task_id
    assert submission.submitted_by == standard_user.id
    task = await task_service.fetch_task_record(task_id)
    assert task.status == "completed"


async def test_submission_completion_does_not_spawn_successor(insert_task, form, standard_user):
    task_id = await insert_task(recurrence_type="daily", recurrence_interval=1)

    await submission_service.create_submission(
        SubmissionIn(form_id=form.id, task_id=task_id, submission_data={}),
        submitted_by=standard_user.id,
    )

    rows = await database.fetch_all(task_table.select())
    assert [r.id for r in rows] == [task_id]


async def test_submission_without_task(form, standard_user):
    submission = await submission_service.create_submission(
        SubmissionIn(form_id=form.id, submission_data={"ward": "A"}),
        submitted_by=standard_user.id,
    )
    assert submission.task_id is None
    assert submission.form_id == form.id


async def test_submission_missing_form(standard_user):
    with pytest.raises(NotFoundError, match="Form with id 777 not found"):
        await submission_service.create_submission(
            SubmissionIn(form_id=777, submission_data={}),
            submitted_by=standard_user.id,
        )


async def test_submission_missing_task_writes_nothing(form, standard_user):
    with pytest.raises(NotFoundError, match="Task with id 888 not found"):
        await submission_service.create_submission(
            SubmissionIn(form_id=form.id, task_id=888, submission_data={}),
            submitted_by=standard_user.id,
        )
    assert await submission_service.get_submissions() == []


async def test_submission_data_is_kept(form, standard_user):
    payload = {
        "sanitiser_stocked": True,
        "ward": "B",
        "beds": 12,
        "notes": "All clear",
        "checked_on": date(2024, 3, 5),
        "areas": ["sink", "door"],
        "signature": None,
    }
    submission = await submission_service.create_submission(
        SubmissionIn(form_id=form.id, submission_data=payload),
        submitted_by=standard_user.id,
    )

    data = submission.submission_data
    assert data["sanitiser_stocked"] is True
    assert data["beds"] == 12
    assert data["notes"] == "All clear"
    assert data["areas"] == ["sink", "door"]
    assert data["signature"] is None
    assert str(data["checked_on"]).startswith("2024-03-05")


async def test_get_submissions_includes_form_and_submitter(form, standard_user):
    await submission_service.create_submission(
        SubmissionIn(form_id=form.id, submission_data={"ward": "C"}),
        submitted_by=standard_user.id,
    )

    [detail] = await submission_service.get_submissions()

    assert detail.form_title == "Hand Hygiene Audit"
    assert detail.submitter_email == "nurse@example.com"
    assert detail.submitter_first_name == "Nia"
    assert detail.submitter_last_name == "Nurse"
    assert detail.submission_data == {"ward": "C"}


async def test_get_submissions_newest_first_and_filtered(insert_submission, insert_form, admin_user):
    other_form = await insert_form(datetime(2024, 1, 1), title="Fire Safety")
    older = await insert_submission(submitted_at=datetime(2024, 1, 1))
    newer = await insert_submission(submitted_at=datetime(2024, 2, 1))
    elsewhere = await insert_submission(form_id=other_form, submitted_at=datetime(2024, 3, 1))

    everything = await submission_service.get_submissions()
    assert [s.id for s in everything] == [elsewhere, newer, older]

    only_other = await submission_service.get_submissions(form_id=other_form)
    assert [s.id for s in only_other] == [elsewhere]
    assert only_other[0].form_title == "Fire Safety"
