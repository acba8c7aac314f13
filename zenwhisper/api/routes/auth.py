# zenwhisper/api/routes/auth.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from zenwhisper.api.routes.utils import get_state
from zenwhisper.core.logging import get_logger
from zenwhisper.core.state import AppState
from zenwhisper.models.models import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    UserProfile,
    UserRecord,
)
from zenwhisper.services import auth_service
from zenwhisper.services.user_store import DuplicateEmailError

logger = get_logger(__name__)

router = APIRouter(tags=["Authentication"])

# ============================================================================
# ACCOUNT ENDPOINTS
# ============================================================================

@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest, state: AppState = Depends(get_state)):
    """
    Create an account.

    Raises:
        HTTPException: 400 if a field is missing or the email is taken
    """
    if not (request.username and request.email and request.password):
        raise HTTPException(status_code=400, detail="All fields are required")

    try:
        record = auth_service.register_user(
            state.users, request.username, request.email, request.password
        )
    except DuplicateEmailError:
        raise HTTPException(status_code=400, detail="User already exists")

    return {
        "message": "User created",
        "user": UserProfile(username=record.username, email=record.email),
    }


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, state: AppState = Depends(get_state)):
    """
    Exchange credentials for a bearer token.

    Unknown email and wrong password produce the same 401.
    """
    record = None
    if request.email and request.password:
        record = auth_service.authenticate(state.users, request.email, request.password)

    if record is None:
        logger.info("Failed login attempt")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return LoginResponse(
        token=auth_service.create_access_token(record),
        user=UserProfile(username=record.username, email=record.email),
    )


@router.get("/users", response_model=List[UserRecord])
async def list_users(state: AppState = Depends(get_state)):
    """Every stored user record, unfiltered."""
    return state.users.all()
