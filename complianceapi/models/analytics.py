from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AnalyticsFilter(BaseModel):
    tags: Optional[List[str]] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    user_id: Optional[int] = None


class FormAnalytics(BaseModel):
    form_id: int
    form_title: str
    total_submissions: int
    completion_rate: float
    average_completion_time: Optional[float] = None  # seconds
    tags: List[str] = []


class OrganizationAnalytics(BaseModel):
    total_forms: int
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    overall_completion_rate: float
    active_users: int
