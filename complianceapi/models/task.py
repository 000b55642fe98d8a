from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

TaskStatus = Literal["pending", "in_progress", "completed", "overdue"]
RecurrenceType = Literal["none", "daily", "weekly", "monthly"]

# ten years of daily occurrences
MAX_RECURRENCE_INTERVAL = 3650


class TaskIn(BaseModel):
    form_id: int
    assigned_to: int
    title: str = Field(min_length=1)
    due_date: datetime
    recurrence_type: RecurrenceType = "none"
    recurrence_interval: Optional[int] = Field(default=None, ge=1, le=MAX_RECURRENCE_INTERVAL)

    @model_validator(mode="after")
    def check_recurrence(self):
        if self.recurrence_type == "none" and self.recurrence_interval is not None:
            raise ValueError("recurrence_interval must be empty when recurrence_type is 'none'")
        return self


class TaskStatusIn(BaseModel):
    status: TaskStatus


class Task(BaseModel):
    id: int
    form_id: int
    assigned_to: int
    assigned_by: int
    title: str
    due_date: datetime
    status: TaskStatus
    recurrence_type: RecurrenceType
    recurrence_interval: Optional[int] = None
    next_due_date: Optional[datetime] = None
    parent_task_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
