import logging
from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from complianceapi.models.analytics import AnalyticsFilter, FormAnalytics, OrganizationAnalytics
from complianceapi.models.user import User
from complianceapi.security import get_current_user, require_admin
from complianceapi.services import analytics as analytics_service

logger = logging.getLogger(__name__)
router = APIRouter()


def analytics_filter(
    tags: Annotated[Optional[List[str]], Query()] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    user_id: Optional[int] = None,
) -> AnalyticsFilter:
    return AnalyticsFilter(tags=tags, date_from=date_from, date_to=date_to, user_id=user_id)


# e.g. /api/analytics/forms/3?tags=safety&tags=hipaa&date_from=2024-01-01T00:00:00
@router.get("/forms/{fid}", response_model=FormAnalytics, status_code=200)
async def form_analytics(
    fid: int,
    filter: Annotated[AnalyticsFilter, Depends(analytics_filter)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return await analytics_service.get_form_analytics(fid, filter)


@router.get("/organization", response_model=OrganizationAnalytics, status_code=200)
async def organization_analytics(
    filter: Annotated[AnalyticsFilter, Depends(analytics_filter)],
    current_user: Annotated[User, Depends(require_admin)],
):
    return await analytics_service.get_organization_analytics(filter)
