from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.core.config import get_settings
from app.core.responses import success
from app.core.security import SESSION_MAX_AGE, create_session_cookie
from app.core.validation import require_body
from app.deps import SESSION_COOKIE_NAME, get_current_user
from app.models.user import User
from app.services import users as user_service

router = APIRouter()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", min_length=1, max_length=50)
    last_name: str = Field(alias="lastName", min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)


def _set_session(response: ORJSONResponse, user: User) -> ORJSONResponse:
    value = create_session_cookie(user_service.session_payload_for_user(user))
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=value,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=get_settings().env == "production",
        samesite="lax",
        path="/",
    )
    return response


@router.post("/login")
async def auth_login(request: Request):
    """Email/password demo login; body is parsed before any database access."""
    body = await require_body(request, LoginRequest)
    user = await user_service.login(body.email, body.password)
    return _set_session(success(user_service.profile(user)), user)


@router.post("/signup")
async def auth_signup(request: Request):
    body = await require_body(request, SignupRequest)
    user = await user_service.signup(body.first_name, body.last_name, body.email)
    data = {"userId": str(user.id), "name": user.name, "email": user.email}
    return _set_session(success(data, status_code=status.HTTP_201_CREATED), user)


@router.get("/me")
async def auth_me(user: User = Depends(get_current_user)):
    """Return the resolved caller's profile."""
    return success(user_service.profile(user))
