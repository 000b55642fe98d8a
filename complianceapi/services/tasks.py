"""Task lifecycle.

Status moves pending -> in_progress -> completed, with pending tasks past
their due date swept to overdue whenever the full task list is read.
Completing a recurring task through ``update_task_status`` spawns exactly one
successor, a copy of the task due one interval after the original due date.
"""
import datetime
import logging
from typing import Optional

import sqlalchemy

from complianceapi.database import database, form_table, integrity_errors, task_table, user_table
from complianceapi.exceptions import ConflictError, NotFoundError
from complianceapi.models.task import Task, TaskIn, TaskStatus
from complianceapi.recurrence import advance, as_naive_utc, is_recurring, next_due_date, utcnow

logger = logging.getLogger(__name__)

PENDING = "pending"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
OVERDUE = "overdue"


def task_from_record(record) -> Task:
    return Task(
        id=record.id,
        form_id=record.form_id,
        assigned_to=record.assigned_to,
        assigned_by=record.assigned_by,
        title=record.title,
        due_date=record.due_date,
        status=record.status,
        recurrence_type=record.recurrence_type,
        recurrence_interval=record.recurrence_interval,
        next_due_date=record.next_due_date,
        parent_task_id=record.parent_task_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def fetch_task_record(task_id: int):
    record = await database.fetch_one(task_table.select().where(task_table.c.id == task_id))
    if record is None:
        raise NotFoundError("Task", task_id)
    return record


async def _require_row(table: sqlalchemy.Table, entity: str, row_id: int) -> None:
    query = sqlalchemy.select(table.c.id).where(table.c.id == row_id)
    if await database.fetch_one(query) is None:
        raise NotFoundError(entity, row_id)


async def create_task(data: TaskIn, assigned_by: int) -> Task:
    await _require_row(form_table, "Form", data.form_id)
    await _require_row(user_table, "User", data.assigned_to)
    await _require_row(user_table, "Assigning user", assigned_by)

    due_date = as_naive_utc(data.due_date)
    now = utcnow()
    query = task_table.insert().values(
        form_id=data.form_id,
        assigned_to=data.assigned_to,
        assigned_by=assigned_by,
        title=data.title,
        due_date=due_date,
        status=PENDING,
        recurrence_type=data.recurrence_type,
        recurrence_interval=data.recurrence_interval,
        next_due_date=next_due_date(due_date, data.recurrence_type, data.recurrence_interval),
        created_at=now,
        updated_at=now,
    )
    task_id = await database.execute(query)
    logger.info(
        "Task created",
        extra={"task_id": task_id, "form_id": data.form_id, "assigned_to": data.assigned_to},
    )
    return task_from_record(await fetch_task_record(task_id))


async def _find_successor(task_id: int):
    query = sqlalchemy.select(task_table.c.id).where(task_table.c.parent_task_id == task_id)
    return await database.fetch_one(query)


async def _spawn_successor(task) -> Optional[int]:
    """Insert the next occurrence of a completed recurring task.

    A task spawns at most once; the unique ``parent_task_id`` column rejects a
    concurrent second spawn.
    """
    existing = await _find_successor(task.id)
    if existing is not None:
        logger.debug("Successor already exists", extra={"task_id": task.id, "successor_id": existing.id})
        return None

    now = utcnow()
    query = task_table.insert().values(
        form_id=task.form_id,
        assigned_to=task.assigned_to,
        assigned_by=task.assigned_by,
        title=task.title,
        due_date=advance(task.due_date, task.recurrence_type, task.recurrence_interval),
        status=PENDING,
        recurrence_type=task.recurrence_type,
        recurrence_interval=task.recurrence_interval,
        next_due_date=None,
        parent_task_id=task.id,
        created_at=now,
        updated_at=now,
    )
    try:
        successor_id = await database.execute(query)
    except integrity_errors as e:
        raise ConflictError(f"Task {task.id} has already spawned its next occurrence") from e
    logger.info("Recurring task spawned", extra={"task_id": task.id, "successor_id": successor_id})
    return successor_id


async def update_task_status(task_id: int, status: TaskStatus) -> Task:
    async with database.transaction():
        existing = await fetch_task_record(task_id)

        await database.execute(
            task_table.update()
            .where(task_table.c.id == task_id)
            .values(status=status, updated_at=utcnow())
        )
        logger.info(
            "Task status changed",
            extra={"task_id": task_id, "from": existing.status, "to": status},
        )

        if status == COMPLETED and is_recurring(
            existing.recurrence_type, existing.recurrence_interval
        ):
            await _spawn_successor(existing)

    return task_from_record(await fetch_task_record(task_id))


async def complete_task_for_submission(task_id: int) -> None:
    """Mark a task completed because a submission answered it.

    Unlike ``update_task_status`` this never spawns a recurring successor.
    """
    await database.execute(
        task_table.update()
        .where(task_table.c.id == task_id)
        .values(status=COMPLETED, updated_at=utcnow())
    )
    logger.info("Task completed by submission", extra={"task_id": task_id})


async def sweep_overdue_tasks(now: Optional[datetime.datetime] = None) -> int:
    """Move pending tasks whose due date has passed to overdue.

    Only pending rows are touched, so a second sweep changes nothing.
    """
    now = now or utcnow()
    stale = sqlalchemy.and_(task_table.c.due_date < now, task_table.c.status == PENDING)

    async with database.transaction():
        swept = await database.fetch_val(
            sqlalchemy.select(sqlalchemy.func.count()).select_from(task_table).where(stale)
        )
        if swept:
            await database.execute(
                task_table.update().where(stale).values(status=OVERDUE, updated_at=now)
            )

    if swept:
        logger.info("Overdue sweep", extra={"swept": swept})
    return swept


async def get_all_tasks() -> list[Task]:
    await sweep_overdue_tasks()

    query = (
        task_table.select()
        .select_from(
            task_table.join(user_table, task_table.c.assigned_to == user_table.c.id).join(
                form_table, task_table.c.form_id == form_table.c.id
            )
        )
        .order_by(task_table.c.id)
    )
    return [task_from_record(r) for r in await database.fetch_all(query)]


async def get_tasks_by_user(user_id: int) -> list[Task]:
    query = task_table.select().where(task_table.c.assigned_to == user_id).order_by(task_table.c.id)
    return [task_from_record(r) for r in await database.fetch_all(query)]
