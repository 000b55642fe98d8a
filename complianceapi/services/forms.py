import logging
from typing import Optional

from complianceapi.database import database, form_table, formfield_table, user_table
from complianceapi.exceptions import NotFoundError
from complianceapi.json_columns import dump_str_list, load_optional_str_list, load_str_list
from complianceapi.models.form import Form, FormField, FormIn, FormUpdateIn, FormWithFields
from complianceapi.recurrence import utcnow

logger = logging.getLogger(__name__)


def form_from_record(record) -> Form:
    return Form(
        id=record.id,
        title=record.title,
        description=record.description,
        tags=load_str_list(record.tags),
        is_active=record.is_active,
        created_by=record.created_by,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def field_from_record(record) -> FormField:
    return FormField(
        id=record.id,
        form_id=record.form_id,
        field_type=record.field_type,
        field_label=record.field_label,
        field_key=record.field_key,
        is_required=record.is_required,
        field_options=load_optional_str_list(record.field_options),
        field_order=record.field_order,
        created_at=record.created_at,
    )


async def fetch_form_record(form_id: int):
    record = await database.fetch_one(form_table.select().where(form_table.c.id == form_id))
    if record is None:
        raise NotFoundError("Form", form_id)
    return record


async def create_form(data: FormIn, created_by: int) -> Form:
    """Insert a form and its fields as one unit."""
    now = utcnow()
    async with database.transaction():
        form_id = await database.execute(
            form_table.insert().values(
                title=data.title,
                description=data.description,
                tags=dump_str_list(data.tags),
                is_active=True,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
        )
        for f in data.fields:
            await database.execute(
                formfield_table.insert().values(
                    form_id=form_id,
                    field_type=f.field_type,
                    field_label=f.field_label,
                    field_key=f.field_key,
                    is_required=f.is_required,
                    field_options=dump_str_list(f.field_options),
                    field_order=f.field_order,
                    created_at=now,
                )
            )

    logger.info("Form created", extra={"form_id": form_id, "fields": len(data.fields)})
    return form_from_record(await fetch_form_record(form_id))


async def update_form(form_id: int, data: FormUpdateIn) -> Form:
    await fetch_form_record(form_id)

    update_values = {"updated_at": utcnow()}
    provided = data.model_fields_set
    if "title" in provided and data.title is not None:
        update_values["title"] = data.title
    if "description" in provided:
        update_values["description"] = data.description
    if "tags" in provided:
        update_values["tags"] = dump_str_list(data.tags)
    if "is_active" in provided and data.is_active is not None:
        update_values["is_active"] = data.is_active

    query = form_table.update().where(form_table.c.id == form_id).values(**update_values)
    logger.debug(query)
    await database.execute(query)
    return form_from_record(await fetch_form_record(form_id))


async def get_forms() -> list[Form]:
    """Active forms whose creator still exists, newest first."""
    query = (
        form_table.select()
        .select_from(form_table.join(user_table, form_table.c.created_by == user_table.c.id))
        .where(form_table.c.is_active.is_(True))
        .order_by(form_table.c.created_at.desc(), form_table.c.id.desc())
    )
    return [form_from_record(r) for r in await database.fetch_all(query)]


async def get_form_by_id(form_id: int) -> Optional[FormWithFields]:
    record = await database.fetch_one(form_table.select().where(form_table.c.id == form_id))
    if record is None:
        return None

    fields_query = (
        formfield_table.select()
        .where(formfield_table.c.form_id == form_id)
        .order_by(formfield_table.c.field_order)
    )
    fields = await database.fetch_all(fields_query)
    return FormWithFields(
        **form_from_record(record).model_dump(),
        fields=[field_from_record(f) for f in fields],
    )
