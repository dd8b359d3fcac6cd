"""Authentication API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Security, status

from auth import AuthService, RequestContext, get_request_context
from auth.schemas import (
    LoginRequest, RefreshRequest, RegisterRequest, UpdateAuthRequest, parse_profile_payload
)
from ..responses import no_content, success
from ..services import get_auth_service

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a customer or seller and return its first token pair."""
    pair = await service.register(
        request.user_type,
        request.username,
        request.email,
        request.password
    )
    return success(pair, status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    request: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Log in by username or email; any previous session is replaced."""
    pair = await service.login(
        request.user_type,
        request.password,
        username=request.username,
        email=request.email
    )
    return success(pair)


@router.post("/refresh")
async def refresh(
    request: RefreshRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange the current refresh token for a new token pair."""
    pair = await service.refresh(request.refresh_token)
    return success(pair)


@router.put("/update-auth", status_code=status.HTTP_204_NO_CONTENT)
async def update_auth(
    request: UpdateAuthRequest,
    context: RequestContext = Security(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    """Change email, username or password. Ends the current session."""
    await service.update_credentials(
        request.refresh_token,
        context.user_id,
        email=request.email,
        username=request.username,
        old_password=request.old_password,
        new_password=request.new_password
    )
    return no_content()


@router.put("/update-profile", status_code=status.HTTP_204_NO_CONTENT)
async def update_profile(
    body: Dict[str, Any] = Body(...),
    context: RequestContext = Security(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    """Update the caller's customer or seller profile."""
    payload = parse_profile_payload(context.role, body)
    await service.update_profile(context.user_id, context.role, payload)
    return no_content()


@router.delete("/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    context: RequestContext = Security(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    """Delete the caller's account."""
    await service.delete_user(context.user_id)
    return no_content()


# Export the router
__all__ = ['router']
