from fastapi import APIRouter
from models.user_model import LoginRequest, LoginResponse, MessageResponse, UserCreate
from utils.user_handlers import login_handler, register_user_handler

auth_router = APIRouter(tags=["Authentication"])


@auth_router.post("/register", response_model=MessageResponse, status_code=201)
async def register(user: UserCreate):
    return await register_user_handler(user)


@auth_router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest):
    return await login_handler(credentials)
