"""Completion analytics.

Read-only aggregate counts over tasks and submissions. Rates are percentages
rounded to two decimals and are 0 whenever there are no tasks to measure
against.
"""
import logging
from typing import Optional

import sqlalchemy

from complianceapi.database import database, form_table, submission_table, task_table, user_table
from complianceapi.json_columns import load_str_list
from complianceapi.models.analytics import AnalyticsFilter, FormAnalytics, OrganizationAnalytics
from complianceapi.recurrence import as_naive_utc
from complianceapi.services.forms import fetch_form_record

logger = logging.getLogger(__name__)


def completion_rate(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    # submissions made without a task can outnumber the tasks
    return min(100.0, round(numerator / denominator * 100, 2))


def _date_conditions(column: sqlalchemy.Column, filter: Optional[AnalyticsFilter]) -> list:
    conditions = []
    if filter is None:
        return conditions
    if filter.date_from is not None:
        conditions.append(column >= as_naive_utc(filter.date_from))
    if filter.date_to is not None:
        conditions.append(column <= as_naive_utc(filter.date_to))
    return conditions


async def _count(table: sqlalchemy.Table, conditions: list) -> int:
    query = sqlalchemy.select(sqlalchemy.func.count()).select_from(table)
    if conditions:
        query = query.where(*conditions)
    return await database.fetch_val(query)


async def get_organization_analytics(
    filter: Optional[AnalyticsFilter] = None,
) -> OrganizationAnalytics:
    # tags are accepted but only narrow per-form analytics
    form_conditions = _date_conditions(form_table.c.created_at, filter)
    task_conditions = _date_conditions(task_table.c.created_at, filter)
    if filter is not None and filter.user_id is not None:
        task_conditions.append(task_table.c.assigned_to == filter.user_id)

    total_forms = await _count(form_table, form_conditions)
    total_tasks = await _count(task_table, task_conditions)
    completed_tasks = await _count(task_table, [*task_conditions, task_table.c.status == "completed"])
    overdue_tasks = await _count(task_table, [*task_conditions, task_table.c.status == "overdue"])
    active_users = await _count(user_table, [user_table.c.is_active.is_(True)])

    return OrganizationAnalytics(
        total_forms=total_forms,
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        overdue_tasks=overdue_tasks,
        overall_completion_rate=completion_rate(completed_tasks, total_tasks),
        active_users=active_users,
    )


async def _average_completion_seconds(submission_conditions: list) -> Optional[float]:
    query = (
        sqlalchemy.select(
            submission_table.c.submitted_at,
            task_table.c.created_at.label("task_created_at"),
        )
        .select_from(submission_table.join(task_table, submission_table.c.task_id == task_table.c.id))
        .where(*submission_conditions)
    )
    rows = await database.fetch_all(query)
    if not rows:
        return None
    total = sum((r.submitted_at - r.task_created_at).total_seconds() for r in rows)
    return total / len(rows)


async def get_form_analytics(
    form_id: int, filter: Optional[AnalyticsFilter] = None
) -> FormAnalytics:
    form = await fetch_form_record(form_id)
    tags = load_str_list(form.tags)

    if filter is not None and filter.tags and not set(filter.tags) & set(tags):
        logger.debug("Form excluded by tag filter", extra={"form_id": form_id})
        return FormAnalytics(
            form_id=form_id,
            form_title=form.title,
            total_submissions=0,
            completion_rate=0,
            average_completion_time=None,
            tags=tags,
        )

    submission_conditions = [
        submission_table.c.form_id == form_id,
        *_date_conditions(submission_table.c.submitted_at, filter),
    ]
    task_conditions = [
        task_table.c.form_id == form_id,
        *_date_conditions(task_table.c.created_at, filter),
    ]
    if filter is not None and filter.user_id is not None:
        submission_conditions.append(submission_table.c.submitted_by == filter.user_id)
        task_conditions.append(task_table.c.assigned_to == filter.user_id)

    total_submissions = await _count(submission_table, submission_conditions)
    total_tasks = await _count(task_table, task_conditions)

    return FormAnalytics(
        form_id=form_id,
        form_title=form.title,
        total_submissions=total_submissions,
        completion_rate=completion_rate(total_submissions, total_tasks),
        average_completion_time=await _average_completion_seconds(submission_conditions),
        tags=tags,
    )
