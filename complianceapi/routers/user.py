import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException
from complianceapi.models.user import LoginIn, Token, User, UserIn, UserUpdateIn
from complianceapi.security import get_current_user, require_admin
from complianceapi.services import users as user_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/token", response_model=Token, status_code=200)
async def login(credentials: LoginIn):
    return await user_service.login_user(credentials.email, credentials.password)


@router.get("/me", response_model=User, status_code=200)
async def read_current_user(current_user: Annotated[User, Depends(get_current_user)]):
    return current_user


@router.get("", response_model=List[User], status_code=200)
async def list_users(current_user: Annotated[User, Depends(require_admin)]):
    return await user_service.get_users()


@router.post("", response_model=User, status_code=201)
async def create_user(user: UserIn, current_user: Annotated[User, Depends(require_admin)]):
    return await user_service.create_user(user)


@router.put("/{uid}", response_model=User, status_code=200)
async def update_user(uid: int, user: UserUpdateIn, current_user: Annotated[User, Depends(get_current_user)]):
    is_self = uid == current_user.id
    is_admin = current_user.role == "admin"
    if not (is_self or is_admin):
        raise HTTPException(
            status_code=403,
            detail="You do not have permission to update this user",
        )
    # role and activation are admin-only, even on your own account
    if not is_admin and (user.role is not None or user.is_active is not None):
        raise HTTPException(
            status_code=403,
            detail="Only administrators can change role or activation",
        )
    return await user_service.update_user(uid, user)
