from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.models import User

from .exceptions import AuthenticationError
from .get_db import get_db_async
from .validators import jwt_protect


async def get_current_user(
    request: Request,
    user_id=Depends(jwt_protect),
    db: AsyncSession = Depends(get_db_async),
) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if not user:
        raise AuthenticationError("Not Authenticated")

    request.state.user = user
    return user
