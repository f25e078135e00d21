from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional, Union
import logging

from ..models.caregiver import Caregiver
from ..models.patient import Patient
from ..core.exceptions import DuplicateUsernameError, StorageError
from ..core.security import (
    verify_password, get_password_hash, create_access_token,
    verify_token, Token, UserRole, AuthenticationError
)
from ..core.validation import require_name

logger = logging.getLogger(__name__)

Account = Union[Caregiver, Patient]

ACCOUNT_MODELS = {
    UserRole.CAREGIVER: Caregiver,
    UserRole.PATIENT: Patient,
}

class AuthService:
    """Credential store for patients and caregivers."""

    def __init__(self, db: Session, redis_client=None):
        self.db = db
        self.redis = redis_client

    def create_patient(self, username: str, password: str) -> Patient:
        return self._create_account(UserRole.PATIENT, username, password)

    def create_caregiver(self, username: str, password: str) -> Caregiver:
        return self._create_account(UserRole.CAREGIVER, username, password)

    def find_patient(self, username: str) -> Optional[Patient]:
        return self.find_account(UserRole.PATIENT, username)

    def find_caregiver(self, username: str) -> Optional[Caregiver]:
        return self.find_account(UserRole.CAREGIVER, username)

    def find_account(self, role: UserRole, username: str) -> Optional[Account]:
        model = ACCOUNT_MODELS[role]
        try:
            return self.db.execute(
                select(model).where(model.username == username)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError("Error occurred when checking username") from e

    def verify(self, username: str, password: str, role: UserRole) -> bool:
        """Check a password against the stored salted hash."""
        account = self.find_account(role, username)
        if not account:
            return False
        return verify_password(password, account.password_hash)

    def login(self, username: str, password: str, role: UserRole) -> Token:
        """Authenticate and return an access token."""
        if not self.verify(username, password, role):
            raise AuthenticationError("Invalid username or password")

        logger.info(f"{role.value.capitalize()} logged in as: {username}")
        return create_access_token(username, role)

    def logout(self, token: str) -> bool:
        """Revoke the token until it would have expired anyway."""
        token_payload = verify_token(token)
        if not token_payload or not token_payload.jti:
            return False

        now = int(datetime.now(timezone.utc).timestamp())
        remaining = max((token_payload.exp or now) - now, 1)
        self.redis.setex(revoked_token_key(token_payload.jti), remaining, token_payload.sub)
        return True

    def is_revoked(self, jti: str) -> bool:
        return self.redis.get(revoked_token_key(jti)) is not None

    def _create_account(self, role: UserRole, username: str, password: str) -> Account:
        username = require_name(username, "username")

        # Check if username has been taken already
        if self.find_account(role, username):
            raise DuplicateUsernameError()

        model = ACCOUNT_MODELS[role]
        account = model(username=username, password_hash=get_password_hash(password))

        try:
            self.db.add(account)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateUsernameError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Create failed") from e

        self.db.refresh(account)
        logger.info(f"{role.value.capitalize()} account created: {username}")
        return account

def revoked_token_key(jti: str) -> str:
    return f"revoked_token:{jti}"
