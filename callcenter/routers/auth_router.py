from fastapi import APIRouter, Depends
from callcenter.models.schemas import SignUpRequest, LoginRequest, ChangePasswordRequest
from callcenter.services import auth_service
from callcenter.utils.auth import Principal, get_current_principal

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/signup", status_code=201)
async def signup(data: SignUpRequest):
    return await auth_service.sign_up(data.username, data.password)


@router.post("/login")
async def login(data: LoginRequest):
    return await auth_service.sign_in(data.username, data.password)


@router.post("/logout")
async def logout(principal: Principal = Depends(get_current_principal)):
    return await auth_service.sign_out(principal.token)


@router.get("/me")
async def me(principal: Principal = Depends(get_current_principal)):
    return {"id": principal.user_id, "username": principal.username}


@router.post("/change-password")
async def change_password(data: ChangePasswordRequest, principal: Principal = Depends(get_current_principal)):
    return await auth_service.change_password(principal.user_id, data.current_password, data.new_password)
