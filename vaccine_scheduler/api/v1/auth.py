from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ...core.database import get_db, get_redis
from ...core.security import security, UserContext, UserRole
from ...api.deps import get_current_user, get_current_user_token, rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import AccountCreate, AccountResponse, TokenResponse, UserLogin

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/patients", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Create a patient account."""
    patient = AuthService(db).create_patient(account_data.username, account_data.password)
    return AccountResponse(
        username=patient.username, role=UserRole.PATIENT, created_at=patient.created_at
    )

@router.post("/caregivers", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_caregiver(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Create a caregiver account."""
    caregiver = AuthService(db).create_caregiver(account_data.username, account_data.password)
    return AccountResponse(
        username=caregiver.username, role=UserRole.CAREGIVER, created_at=caregiver.created_at
    )

@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a patient or caregiver and return an access token."""
    token = AuthService(db).login(login_data.username, login_data.password, login_data.role)
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        username=login_data.username,
        role=login_data.role
    )

@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    _token = Depends(get_current_user_token),
    redis_client = Depends(get_redis)
):
    """Logout by revoking the presented access token."""
    AuthService(None, redis_client).logout(credentials.credentials)
    return {"message": "Successfully logged out!"}

@router.get("/me", response_model=AccountResponse)
async def get_current_user_info(
    current_user: UserContext = Depends(get_current_user)
):
    """Get current user information."""
    return AccountResponse(username=current_user.username, role=current_user.role)
