import os
from datetime import datetime
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

os.environ["ENV_STATE"] = "test"
from complianceapi.database import database, form_table, submission_table, task_table  # noqa: E402
from complianceapi.main import app  # noqa: E402
from complianceapi.models.form import FormFieldIn, FormIn  # noqa: E402
from complianceapi.models.user import UserIn  # noqa: E402
from complianceapi.recurrence import utcnow  # noqa: E402
from complianceapi.services import forms as form_service  # noqa: E402
from complianceapi.services import users as user_service  # noqa: E402


@pytest.fixture()
async def db() -> AsyncGenerator:
    # force_rollback: everything written during a test is discarded on disconnect
    await database.connect()
    yield database
    await database.disconnect()


@pytest.fixture()
async def async_client(db) -> AsyncGenerator:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def admin_user(db):
    return await user_service.create_user(
        UserIn(
            email="admin@example.com",
            password="adminpass123",
            first_name="Ada",
            last_name="Admin",
            role="admin",
        )
    )


@pytest.fixture()
async def standard_user(db):
    return await user_service.create_user(
        UserIn(
            email="nurse@example.com",
            password="nursepass123",
            first_name="Nia",
            last_name="Nurse",
            role="standard_user",
        )
    )


@pytest.fixture()
async def admin_token(admin_user) -> str:
    token = await user_service.login_user("admin@example.com", "adminpass123")
    return token.access_token


@pytest.fixture()
async def user_token(standard_user) -> str:
    token = await user_service.login_user("nurse@example.com", "nursepass123")
    return token.access_token


@pytest.fixture()
async def form(admin_user):
    return await form_service.create_form(
        FormIn(
            title="Hand Hygiene Audit",
            description="Monthly ward hygiene check",
            tags=["test", "hygiene"],
            fields=[
                FormFieldIn(
                    field_type="checkbox",
                    field_label="Sanitiser stocked",
                    field_key="sanitiser_stocked",
                    is_required=True,
                    field_order=1,
                ),
                FormFieldIn(
                    field_type="select_dropdown",
                    field_label="Ward",
                    field_key="ward",
                    is_required=True,
                    field_options=["A", "B", "C"],
                    field_order=2,
                ),
            ],
        ),
        created_by=admin_user.id,
    )


@pytest.fixture()
def insert_task(form, standard_user, admin_user):
    """Insert a task row directly, bypassing the service, for fixed timestamps."""

    async def _insert(**values) -> int:
        now = utcnow()
        row = {
            "form_id": form.id,
            "assigned_to": standard_user.id,
            "assigned_by": admin_user.id,
            "title": "Raw task",
            "due_date": now,
            "status": "pending",
            "recurrence_type": "none",
            "recurrence_interval": None,
            "created_at": now,
            "updated_at": now,
            **values,
        }
        return await database.execute(task_table.insert().values(**row))

    return _insert


@pytest.fixture()
def insert_submission(form, standard_user):
    async def _insert(**values) -> int:
        row = {
            "form_id": form.id,
            "task_id": None,
            "submitted_by": standard_user.id,
            "submission_data": "{}",
            "submitted_at": utcnow(),
            **values,
        }
        return await database.execute(submission_table.insert().values(**row))

    return _insert


@pytest.fixture()
def insert_form(admin_user):
    async def _insert(created_at: datetime, title: str = "Raw form") -> int:
        return await database.execute(
            form_table.insert().values(
                title=title,
                is_active=True,
                created_by=admin_user.id,
                created_at=created_at,
                updated_at=created_at,
            )
        )

    return _insert


@pytest.fixture()
def admin_headers(admin_token) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture()
def user_headers(user_token) -> dict:
    return {"Authorization": f"Bearer {user_token}"}
