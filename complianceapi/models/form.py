from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

FieldType = Literal[
    "text_input",
    "number_input",
    "text_area",
    "checkbox",
    "radio_button",
    "select_dropdown",
    "date_picker",
]


class FormFieldIn(BaseModel):
    field_type: FieldType
    field_label: str = Field(min_length=1)
    field_key: str = Field(min_length=1)
    is_required: bool = False
    field_options: Optional[List[str]] = None  # radio_button / select_dropdown only
    field_order: int


class FormField(BaseModel):
    id: int
    form_id: int
    field_type: FieldType
    field_label: str
    field_key: str
    is_required: bool
    field_options: Optional[List[str]] = None
    field_order: int
    created_at: datetime


class FormIn(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    fields: List[FormFieldIn] = []

    @model_validator(mode="after")
    def check_fields_unique(self):
        keys = [f.field_key for f in self.fields]
        if len(keys) != len(set(keys)):
            raise ValueError("field_key must be unique within a form")
        orders = [f.field_order for f in self.fields]
        if len(orders) != len(set(orders)):
            raise ValueError("field_order must be unique within a form")
        return self


class FormUpdateIn(BaseModel):
    """Partial update; only the attributes present in the request are written."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None


class Form(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    tags: List[str] = []
    is_active: bool
    created_by: int
    created_at: datetime
    updated_at: datetime


class FormWithFields(Form):
    fields: List[FormField] = []
