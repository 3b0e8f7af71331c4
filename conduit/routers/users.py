from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import get_db
from conduit.dependencies import require_user
from conduit.schemas import LoginRequest, RegisterRequest, UpdateUserRequest, UserResponse
from conduit.services import auth_service

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/users", status_code=201, response_model=UserResponse)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    return UserResponse(user=await auth_service.register(db, data.user))


@router.post("/users/login", response_model=UserResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    return UserResponse(user=await auth_service.login(db, data.user))


@router.get("/user", response_model=UserResponse)
async def get_current_user(
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse(user=await auth_service.get_current_user(db, user_id))


@router.put("/user", response_model=UserResponse)
async def update_current_user(
    data: UpdateUserRequest,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return UserResponse(user=await auth_service.update_user(db, user_id, data.user))
