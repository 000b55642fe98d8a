from datetime import datetime

import pytest
from pydantic import ValidationError

from complianceapi.exceptions import NotFoundError
from complianceapi.models.form import FormFieldIn, FormIn, FormUpdateIn
from complianceapi.models.user import UserIn
from complianceapi.services import forms as form_service
from complianceapi.services import users as user_service


def field(key: str, order: int, **overrides) -> FormFieldIn:
    values = {"field_type": "text_input", "field_label": key.title(), "field_key": key, "field_order": order}
    values.update(overrides)
    return FormFieldIn(**values)


async def test_create_form_with_fields(form, admin_user):
    assert form.title == "Hand Hygiene Audit"
    assert form.tags == ["test", "hygiene"]
    assert form.is_active is True
    assert form.created_by == admin_user.id

    detail = await form_service.get_form_by_id(form.id)
    assert [f.field_key for f in detail.fields] == ["sanitiser_stocked", "ward"]
    assert detail.fields[0].field_options is None
    assert detail.fields[1].field_options == ["A", "B", "C"]
    assert all(f.form_id == form.id for f in detail.fields)


async def test_fields_come_back_in_display_order(admin_user):
    created = await form_service.create_form(
        FormIn(title="Ordered", fields=[field("third", 3), field("first", 1), field("second", 2)]),
        created_by=admin_user.id,
    )

    detail = await form_service.get_form_by_id(created.id)

    assert [f.field_order for f in detail.fields] == [1, 2, 3]


async def test_form_without_tags_reads_back_empty(admin_user):
    created = await form_service.create_form(FormIn(title="Plain", tags=[]), created_by=admin_user.id)
    assert created.tags == []


async def test_get_form_by_id_missing(db):
    assert await form_service.get_form_by_id(404) is None


def test_duplicate_field_keys_rejected():
    with pytest.raises(ValidationError):
        FormIn(title="Dup", fields=[field("ward", 1), field("ward", 2)])


def test_duplicate_field_orders_rejected():
    with pytest.raises(ValidationError):
        FormIn(title="Dup", fields=[field("ward", 1), field("bed", 1)])


def test_unknown_field_type_rejected():
    with pytest.raises(ValidationError):
        field("signature", 1, field_type="signature_pad")


async def test_update_form_partial(form):
    updated = await form_service.update_form(form.id, FormUpdateIn(description="Weekly now"))

    assert updated.description == "Weekly now"
    assert updated.title == "Hand Hygiene Audit"
    assert updated.tags == ["test", "hygiene"]
    assert updated.updated_at >= form.updated_at


async def test_update_form_clears_tags(form):
    updated = await form_service.update_form(form.id, FormUpdateIn(tags=[]))
    assert updated.tags == []


async def test_update_form_replaces_tags(form):
    updated = await form_service.update_form(form.id, FormUpdateIn(tags=["safety", "hipaa"]))
    assert updated.tags == ["safety", "hipaa"]


async def test_update_missing_form(db):
    with pytest.raises(NotFoundError, match="Form with id 55 not found"):
        await form_service.update_form(55, FormUpdateIn(title="Nope"))


async def test_get_forms_only_active_newest_first(insert_form, form):
    older = await insert_form(datetime(2023, 1, 1), title="Older")
    retired = await insert_form(datetime(2023, 6, 1), title="Retired")
    await form_service.update_form(retired, FormUpdateIn(is_active=False))

    forms = await form_service.get_forms()

    assert [f.id for f in forms] == [form.id, older]


async def test_get_forms_lists_forms_of_every_creator(admin_user, form):
    other_admin = await user_service.create_user(
        UserIn(email="boss@example.com", password="bosspass123", first_name="B", last_name="Oss", role="admin")
    )
    theirs = await form_service.create_form(FormIn(title="Theirs"), created_by=other_admin.id)

    forms = await form_service.get_forms()

    assert {f.id for f in forms} == {form.id, theirs.id}
