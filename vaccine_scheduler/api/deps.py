from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import (
    security, verify_token, AuthenticationError,
    AuthorizationError, UserRole, TokenPayload, UserContext
)
from ..services.auth_service import AuthService

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    redis_client = Depends(get_redis)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token = credentials.credentials

    # Verify token
    token_payload = verify_token(token)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    if token_payload.jti and AuthService(None, redis_client).is_revoked(token_payload.jti):
        raise AuthenticationError("Token has been revoked")

    return token_payload

async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> UserContext:
    """Resolve the token to the explicit identity handed to every operation."""
    if not token_payload.sub or not token_payload.role:
        raise AuthenticationError("Invalid token payload")

    account = AuthService(db).find_account(token_payload.role, token_payload.sub)
    if not account:
        raise AuthenticationError("User not found")

    return UserContext(username=account.username, role=token_payload.role)

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific user roles."""
    async def role_checker(
        current_user: UserContext = Depends(get_current_user)
    ) -> UserContext:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required roles: {[role.value for role in allowed_roles]}"
            )
        return current_user

    return role_checker

# Specific role dependencies
async def get_caregiver_user(
    current_user: UserContext = Depends(require_role([UserRole.CAREGIVER]))
) -> UserContext:
    """Require caregiver role."""
    return current_user

async def get_patient_user(
    current_user: UserContext = Depends(require_role([UserRole.PATIENT]))
) -> UserContext:
    """Require patient role."""
    return current_user

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for authentication endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)  # 1 hour window
    else:
        if int(current_requests) >= settings.RATE_LIMIT_PER_HOUR:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
