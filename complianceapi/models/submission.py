from datetime import date, datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel

SubmissionValue = Union[bool, int, float, datetime, date, str, List[str], None]


class SubmissionIn(BaseModel):
    form_id: int
    task_id: Optional[int] = None
    submission_data: Dict[str, SubmissionValue]


class Submission(BaseModel):
    id: int
    form_id: int
    task_id: Optional[int] = None
    submitted_by: int
    submission_data: Dict[str, SubmissionValue]
    submitted_at: datetime


class SubmissionDetail(Submission):
    form_title: str
    submitter_email: str
    submitter_first_name: str
    submitter_last_name: str
