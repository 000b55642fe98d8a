import datetime
import logging
from typing import Annotated, List

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from complianceapi.config import config
from complianceapi.database import database, user_table
from complianceapi.models.user import User

logging.getLogger('passlib').setLevel(logging.ERROR)
logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/user/token")
pwd_context = CryptContext(schemes=["bcrypt"])


def create_unauthorized_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def access_token_expire_minutes() -> int:
    return config.ACCESS_TOKEN_EXPIRE_MINUTES


def create_access_token(email: str, role: str):
    logger.debug("Creating access token", extra={"email": email})
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(
        minutes=access_token_expire_minutes()
    )
    jwt_data = {"sub": email, "role": role, "exp": expire, "type": "access"}
    encoded_jwt = jwt.encode(jwt_data, key=config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    return encoded_jwt


def get_subject_for_access_token(token: str) -> str:
    """Return the email a valid, unexpired access token was issued to."""
    try:
        claims = jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise create_unauthorized_exception("Token has expired") from e
    except JWTError as e:
        raise create_unauthorized_exception("Invalid token") from e

    if claims.get("type") != "access":
        raise create_unauthorized_exception("Not an access token")
    email = claims.get("sub")
    if not email:
        raise create_unauthorized_exception("Token has no subject")
    return email


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def user_from_record(record) -> User:
    return User(
        id=record.id,
        email=record.email,
        first_name=record.first_name,
        last_name=record.last_name,
        role=record.role,
        is_active=record.is_active,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def get_user(email: str):
    query = user_table.select().where(user_table.c.email == email)
    return await database.fetch_one(query)


async def get_current_user(token: Annotated[str, Depends(oauth2_scheme)]) -> User:
    email = get_subject_for_access_token(token)
    record = await get_user(email=email)
    if record is None:
        raise create_unauthorized_exception("Could not find user for this token")
    if not record.is_active:
        raise create_unauthorized_exception("Account is deactivated")
    return user_from_record(record)


def require_roles(allowed_roles: List[str]):
    async def check_roles(current_user: Annotated[User, Depends(get_current_user)]):
        logger.debug(f"Current user role: {current_user.role}")
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail="Insufficient permissions",
            )
        return current_user
    return check_roles


require_admin = require_roles(["admin"])
