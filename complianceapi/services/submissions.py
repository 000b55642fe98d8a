import logging
from typing import Optional

import sqlalchemy

from complianceapi.database import database, form_table, submission_table, task_table, user_table
from complianceapi.exceptions import NotFoundError
from complianceapi.json_columns import dump_payload, load_payload
from complianceapi.models.submission import Submission, SubmissionDetail, SubmissionIn
from complianceapi.recurrence import utcnow
from complianceapi.services.forms import fetch_form_record
from complianceapi.services.tasks import complete_task_for_submission, fetch_task_record

logger = logging.getLogger(__name__)


def submission_from_record(record) -> Submission:
    return Submission(
        id=record.id,
        form_id=record.form_id,
        task_id=record.task_id,
        submitted_by=record.submitted_by,
        submission_data=load_payload(record.submission_data),
        submitted_at=record.submitted_at,
    )


async def fetch_submission_record(submission_id: int):
    query = submission_table.select().where(submission_table.c.id == submission_id)
    record = await database.fetch_one(query)
    if record is None:
        raise NotFoundError("Submission", submission_id)
    return record


async def create_submission(data: SubmissionIn, submitted_by: int) -> Submission:
    """Record a submission; a linked task is marked completed in the same transaction."""
    await fetch_form_record(data.form_id)
    if data.task_id is not None:
        await fetch_task_record(data.task_id)

    async with database.transaction():
        submission_id = await database.execute(
            submission_table.insert().values(
                form_id=data.form_id,
                task_id=data.task_id,
                submitted_by=submitted_by,
                submission_data=dump_payload(data.submission_data),
                submitted_at=utcnow(),
            )
        )
        if data.task_id is not None:
            await complete_task_for_submission(data.task_id)

    logger.info(
        "Submission recorded",
        extra={"submission_id": submission_id, "form_id": data.form_id, "task_id": data.task_id},
    )
    return submission_from_record(await fetch_submission_record(submission_id))


async def get_submissions(form_id: Optional[int] = None) -> list[SubmissionDetail]:
    query = (
        sqlalchemy.select(
            submission_table,
            form_table.c.title.label("form_title"),
            user_table.c.email.label("submitter_email"),
            user_table.c.first_name.label("submitter_first_name"),
            user_table.c.last_name.label("submitter_last_name"),
        )
        .select_from(
            submission_table.join(form_table, submission_table.c.form_id == form_table.c.id).join(
                user_table, submission_table.c.submitted_by == user_table.c.id
            )
        )
        .order_by(submission_table.c.submitted_at.desc(), submission_table.c.id.desc())
    )
    if form_id is not None:
        query = query.where(submission_table.c.form_id == form_id)

    return [
        SubmissionDetail(
            **submission_from_record(r).model_dump(),
            form_title=r.form_title,
            submitter_email=r.submitter_email,
            submitter_first_name=r.submitter_first_name,
            submitter_last_name=r.submitter_last_name,
        )
        for r in await database.fetch_all(query)
    ]
