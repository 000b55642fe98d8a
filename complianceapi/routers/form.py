import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends
from complianceapi.exceptions import NotFoundError
from complianceapi.models.form import Form, FormIn, FormUpdateIn, FormWithFields
from complianceapi.models.user import User
from complianceapi.security import get_current_user
from complianceapi.services import forms as form_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Form], status_code=200)
async def list_forms(current_user: Annotated[User, Depends(get_current_user)]):
    return await form_service.get_forms()


@router.get("/{fid}", response_model=FormWithFields, status_code=200)
async def get_form(fid: int, current_user: Annotated[User, Depends(get_current_user)]):
    form = await form_service.get_form_by_id(fid)
    if form is None:
        raise NotFoundError("Form", fid)
    return form


@router.post("", response_model=Form, status_code=201)
async def create_form(form: FormIn, current_user: Annotated[User, Depends(get_current_user)]):
    return await form_service.create_form(form, created_by=current_user.id)


@router.put("/{fid}", response_model=Form, status_code=200)
async def update_form(fid: int, form: FormUpdateIn, current_user: Annotated[User, Depends(get_current_user)]):
    return await form_service.update_form(fid, form)
