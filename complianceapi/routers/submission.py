import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends
from complianceapi.models.submission import Submission, SubmissionDetail, SubmissionIn
from complianceapi.models.user import User
from complianceapi.security import get_current_user
from complianceapi.services import submissions as submission_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=Submission, status_code=201)
async def submit(submission: SubmissionIn, current_user: Annotated[User, Depends(get_current_user)]):
    return await submission_service.create_submission(submission, submitted_by=current_user.id)


# e.g. /api/submission?form_id=3
@router.get("", response_model=List[SubmissionDetail], status_code=200)
async def list_submissions(
    current_user: Annotated[User, Depends(get_current_user)],
    form_id: Optional[int] = None,
):
    return await submission_service.get_submissions(form_id)
