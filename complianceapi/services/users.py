import logging

from complianceapi.database import database, user_table
from complianceapi.exceptions import AuthenticationError, ConflictError, NotFoundError
from complianceapi.models.user import Token, User, UserIn, UserSummary, UserUpdateIn
from complianceapi.recurrence import utcnow
from complianceapi.security import (
    create_access_token,
    get_password_hash,
    get_user,
    user_from_record,
    verify_password,
)

logger = logging.getLogger(__name__)


async def get_user_by_id(user_id: int) -> User:
    query = user_table.select().where(user_table.c.id == user_id)
    record = await database.fetch_one(query)
    if record is None:
        raise NotFoundError("User", user_id)
    return user_from_record(record)


async def create_user(data: UserIn) -> User:
    if await get_user(data.email) is not None:
        raise ConflictError("User with this email already exists")

    now = utcnow()
    query = user_table.insert().values(
        email=data.email,
        password_hash=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    logger.debug(query)
    user_id = await database.execute(query)
    logger.info("User created", extra={"user_id": user_id, "role": data.role})
    return await get_user_by_id(user_id)


async def get_users() -> list[User]:
    """Active users only; deactivated accounts are hidden from listings."""
    query = (
        user_table.select()
        .where(user_table.c.is_active.is_(True))
        .order_by(user_table.c.id)
    )
    return [user_from_record(r) for r in await database.fetch_all(query)]


async def update_user(user_id: int, data: UserUpdateIn) -> User:
    await get_user_by_id(user_id)

    update_values = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in update_values:
        clash = await database.fetch_one(
            user_table.select().where(
                user_table.c.email == update_values["email"],
                user_table.c.id != user_id,
            )
        )
        if clash is not None:
            raise ConflictError("User with this email already exists")

    update_values["updated_at"] = utcnow()
    query = user_table.update().where(user_table.c.id == user_id).values(**update_values)
    logger.debug(query)
    await database.execute(query)
    return await get_user_by_id(user_id)


async def login_user(email: str, password: str) -> Token:
    logger.debug("Authenticating user", extra={"email": email})
    record = await get_user(email)
    if record is None or not verify_password(password, record.password_hash):
        raise AuthenticationError("Invalid email or password")
    if not record.is_active:
        raise AuthenticationError("Account is deactivated")

    return Token(
        access_token=create_access_token(record.email, record.role),
        user=UserSummary(
            id=record.id,
            email=record.email,
            first_name=record.first_name,
            last_name=record.last_name,
            role=record.role,
        ),
    )
