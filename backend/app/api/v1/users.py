"""用户API"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.user import user_crud
from app.database import get_session
from app.exceptions import UserAlreadyExistsError, UserNotFoundError
from app.schemas.user import UserCreate, UserResponse

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_session)
):
    """创建用户"""
    existing = await user_crud.get_by_email(db, user_in.email)
    if existing:
        raise UserAlreadyExistsError()
    return await user_crud.create(db, user_in)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_session)
):
    """获取单个用户"""
    user = await user_crud.get(db, user_id)
    if not user:
        raise UserNotFoundError(user_id)
    return user
