"""请求身份依赖

调用方身份取自 X-User-Id 请求头并在用户表中解析，不涉及登录与令牌。
"""
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.config import settings
from app.crud.user import user_crud
from app.database import get_session
from app.exceptions import AuthenticationRequiredError, AdminRequiredError
from app.models.user import User


async def get_optional_user(
    x_user_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_session),
) -> Optional[User]:
    """可选身份：未提供或无法识别时视为匿名"""
    if not x_user_id:
        return None
    return await user_crud.get(db, x_user_id)


async def get_current_user(
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    """必须身份"""
    if user is None:
        raise AuthenticationRequiredError()
    return user


def is_admin(user: User) -> bool:
    return user.role in settings.admin_roles_list


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """管理员身份"""
    if not is_admin(user):
        raise AdminRequiredError()
    return user
