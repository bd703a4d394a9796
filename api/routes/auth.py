"""Authentication routes backed by the hosted auth provider"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from typing import Optional

from api.dependencies import get_access_token, get_current_user
from api.responses import ERROR_RESPONSES
from domain.schemas.auth_schemas import Credentials, CurrentUser, SessionResponse
from services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"], responses=ERROR_RESPONSES)


@router.post(
    "/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED
)
def signup(credentials: Credentials):
    """
    Create an account.

    When the provider requires email confirmation no tokens are returned and
    `emailConfirmationRequired` is true.
    """
    return AuthService.sign_up(credentials.email, credentials.password)


@router.post("/login", response_model=SessionResponse)
def login(credentials: Credentials):
    return AuthService.login(credentials.email, credentials.password)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(access_token: Optional[str] = Depends(get_access_token)):
    AuthService.logout(access_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=CurrentUser)
def me(user: CurrentUser = Depends(get_current_user)):
    return user
